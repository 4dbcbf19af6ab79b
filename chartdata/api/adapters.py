"""
Adapter API

Endpoints exposing CSV parsing and the validate / suggest / transform
capabilities of every adapter kind, plus adapter detection.
"""

import logging

from fastapi import APIRouter, HTTPException

from ..adapters.csv_adapter import CsvAdapter
from ..adapters.factory import create_adapter, detect_adapter_kind, resolve_kind
from ..core.config import settings
from ..models.pivot import PivotConfig
from ..utils import sanitize_for_json
from .schemas import (
    DetectResponse,
    ParseCsvRequest,
    ParseCsvResponse,
    RecordsRequest,
    SuggestResponse,
    TransformRequest,
    TransformResponse,
    ValidationResponse,
)

logger = logging.getLogger("chartdata.api")

router = APIRouter(prefix="/adapters", tags=["adapters"])


def _get_adapter(kind: str):
    adapter_kind = resolve_kind(kind)
    if adapter_kind is None:
        raise HTTPException(status_code=404, detail=f"Unknown adapter kind: {kind}")
    return create_adapter(adapter_kind)


def _check_size(records: list):
    if settings.MAX_RECORDS is not None and len(records) > settings.MAX_RECORDS:
        raise HTTPException(
            status_code=413,
            detail=f"Too many records: {len(records)} (limit {settings.MAX_RECORDS})",
        )


@router.post("/parse-csv", response_model=ParseCsvResponse)
async def parse_csv(request: ParseCsvRequest):
    """Parse delimited text into typed records."""
    records = CsvAdapter.parse_csv(
        request.text,
        delimiter=request.delimiter,
        has_header=request.has_header,
        skip_empty_lines=request.skip_empty_lines,
    )
    _check_size(records)
    return {"count": len(records), "records": sanitize_for_json(records)}


@router.post("/detect", response_model=DetectResponse)
async def detect(request: RecordsRequest):
    """Pick the adapter kind that best fits the records."""
    _check_size(request.records)
    kind = detect_adapter_kind(request.records)
    validation = create_adapter(kind).validate(request.records)
    return {"adapter": kind.value, "validation": validation.to_dict()}


@router.post("/{kind}/validate", response_model=ValidationResponse)
async def validate(kind: str, request: RecordsRequest):
    adapter = _get_adapter(kind)
    _check_size(request.records)
    return adapter.validate(request.records).to_dict()


@router.post("/{kind}/suggest", response_model=SuggestResponse)
async def suggest(kind: str, request: RecordsRequest):
    """Field role suggestions, chart suggestions and a best-guess x/y mapping."""
    adapter = _get_adapter(kind)
    _check_size(request.records)

    auto_mapping = None
    if hasattr(adapter, "suggest_auto_mapping"):
        suggestion = adapter.suggest_auto_mapping(request.records)
        auto_mapping = suggestion.to_dict() if suggestion else None

    return sanitize_for_json({
        "adapter": adapter.kind,
        "fields": adapter.suggest(request.records),
        "charts": adapter.suggest_charts(request.records),
        "best_mapping": adapter.suggest_best_mapping(request.records),
        "auto_mapping": auto_mapping,
    })


@router.post("/{kind}/transform", response_model=TransformResponse)
async def transform(kind: str, request: TransformRequest):
    adapter = _get_adapter(kind)
    _check_size(request.records)

    config = dict(request.mapping)
    if request.pivot_config is not None:
        try:
            config["pivot_config"] = PivotConfig.from_dict(request.pivot_config)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=f"Invalid pivot_config: {e}")

    points = adapter.transform(request.records, config)
    logger.info("transform[%s]: %d points", adapter.kind, len(points))
    return {
        "adapter": adapter.kind,
        "count": len(points),
        "points": sanitize_for_json(points),
    }
