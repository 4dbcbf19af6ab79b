"""
API Request/Response Schemas

Pydantic models used across the adapter endpoints for request validation
and response serialization.
"""

from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any


# ─── Parsing Schemas ────────────────────────────────────────────────

class ParseCsvRequest(BaseModel):
    text: str
    delimiter: str = Field(default=",", min_length=1, max_length=1)
    has_header: bool = True
    skip_empty_lines: bool = True


class ParseCsvResponse(BaseModel):
    count: int
    records: List[Dict[str, Any]]


# ─── Adapter Schemas ────────────────────────────────────────────────

class RecordsRequest(BaseModel):
    records: List[Dict[str, Any]]


class TransformRequest(BaseModel):
    records: List[Dict[str, Any]]
    mapping: Dict[str, str] = Field(description="Role -> dotted field path, e.g. {'x': 'date', 'y': 'sales.total'}")
    pivot_config: Optional[Dict[str, Any]] = None


class ValidationResponse(BaseModel):
    is_valid: bool
    errors: List[str] = []
    warnings: List[str] = []
    confidence: float


class FieldSuggestionResponse(BaseModel):
    field: str
    type: str
    confidence: float
    suggested_role: str


class ChartSuggestionResponse(BaseModel):
    type: str
    confidence: float
    reason: str
    suggested_props: Dict[str, Any] = {}


class SuggestResponse(BaseModel):
    adapter: str
    fields: List[FieldSuggestionResponse]
    charts: List[ChartSuggestionResponse]
    best_mapping: Optional[Dict[str, str]] = None
    auto_mapping: Optional[Dict[str, Any]] = None


class TransformResponse(BaseModel):
    adapter: str
    count: int
    points: List[Dict[str, Any]]


class DetectResponse(BaseModel):
    adapter: str
    validation: ValidationResponse
