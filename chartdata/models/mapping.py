"""
Mapping and detection result types.

These are created fresh on every call and handed back to the caller;
nothing here is persisted.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union


class DataType(str, enum.Enum):
    """Semantic column types produced by type detection."""
    NUMBER = "number"
    STRING = "string"
    DATE = "date"
    BOOLEAN = "boolean"


class MappingRole(str, enum.Enum):
    """Visual-encoding channels a field can drive."""
    X = "x"
    Y = "y"
    COLOR = "color"
    SIZE = "size"


class RowErrorPolicy(str, enum.Enum):
    """How adapters surface rows dropped during transform."""
    STRICT = "strict"  # log a warning, skip the row
    LENIENT = "lenient"  # skip the row silently (debug log only)


# role -> dotted path or accessor function
FieldAccessor = Union[str, Callable[[Dict[str, Any]], Any]]
MappingConfig = Dict[str, Any]


@dataclass
class ColumnTypeInfo:
    """Detected type of a column of raw values."""
    type: DataType
    confidence: float
    samples: List[Any] = field(default_factory=list)
    null_count: int = 0
    subtype: Optional[str] = None  # "currency-usd", "iso-date", "unix-seconds", ...
    format: Optional[str] = None  # "$#,##0.00", "YYYY-MM-DD", ...

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "subtype": self.subtype,
            "format": self.format,
            "confidence": self.confidence,
            "samples": list(self.samples),
            "null_count": self.null_count,
        }


@dataclass
class FieldSuggestion:
    """Suggested encoding role for a single field path."""
    field: str
    type: DataType
    confidence: float
    suggested_role: MappingRole

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "type": self.type.value,
            "confidence": self.confidence,
            "suggested_role": self.suggested_role.value,
        }


@dataclass
class MappingSuggestion:
    """A complete x/y mapping proposed from a structural analysis."""
    mapping: Dict[str, str]
    chart_type: str
    confidence: float
    reasoning: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "auto",
            "mapping": dict(self.mapping),
            "chart_type": self.chart_type,
            "confidence": self.confidence,
            "reasoning": self.reasoning,
        }


@dataclass
class ChartSuggestion:
    """Candidate chart category for a record set."""
    type: str  # "bar-chart", "line-chart", "scatter-plot", "pie-chart"
    confidence: float
    reason: str
    suggested_props: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "confidence": self.confidence,
            "reason": self.reason,
            "suggested_props": dict(self.suggested_props),
        }


@dataclass
class ChartDataPoint:
    """
    A single render-ready point.

    ``x`` and ``y`` are always set and ``y`` is numeric. Roles beyond
    x/y/color/size land in ``extra``.
    """
    x: Any
    y: float
    original_data: Dict[str, Any]
    index: int
    color: Any = None
    size: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def get(self, role: str, default: Any = None) -> Any:
        if role in ("x", "y", "color", "size"):
            value = getattr(self, role)
            return default if value is None else value
        return self.extra.get(role, default)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"x": self.x, "y": self.y}
        if self.color is not None:
            result["color"] = self.color
        if self.size is not None:
            result["size"] = self.size
        result.update(self.extra)
        result["original_data"] = self.original_data
        result["index"] = self.index
        return result


@dataclass
class ValidationResult:
    """Outcome of adapter validation. Only structural failures are invalid."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    confidence: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "confidence": self.confidence,
        }


@dataclass
class NestingComplexity:
    """Depth and schema-drift summary of a nested record sample."""
    max_depth: int
    avg_depth: float
    inconsistent_structures: int


@dataclass
class FlatteningSuggestion:
    strategy: str  # "none", "partial", "full"
    reason: str
    suggested_fields: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy,
            "reason": self.reason,
            "suggested_fields": list(self.suggested_fields),
        }
