"""
Mapping Suggester

Combines type detection and field analysis over every (optionally nested)
field path of a record set, producing role suggestions ranked by
confidence. Results are candidates for a person or UI to accept or
override, never a final answer.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..core.config import settings
from ..models.mapping import DataType, FieldSuggestion
from ..utils import is_null
from .field_analyzer import analyze_field, suggest_role
from .field_paths import enumerate_field_paths, get_nested_value, path_depth
from .type_detector import detect_column_type

logger = logging.getLogger("chartdata.mapping")

MIN_CONFIDENCE = 0.1
MAX_CONFIDENCE = 0.95
DEPTH_DECAY = 0.9


def suggest_mapping(records: Sequence[Dict[str, Any]]) -> List[FieldSuggestion]:
    """
    Suggest an encoding role for every field path of the first record.

    confidence = base role confidence x distribution score x
    0.9 ** (depth - 1), clamped to [0.1, 0.95]. Fields with no non-null
    value in any record are skipped.
    """
    if not records:
        return []

    paths = enumerate_field_paths(records[0], max_depth=settings.MAX_NESTED_DEPTH)
    logger.debug("suggest_mapping: %d records, %d field paths", len(records), len(paths))

    suggestions: List[FieldSuggestion] = []
    for path in paths:
        values = [v for v in (get_nested_value(r, path) for r in records) if not is_null(v)]
        if not values:
            continue

        type_info = detect_column_type(values)
        characteristics = analyze_field(path, values, type_info.type)
        role, confidence = suggest_role(type_info.type, characteristics)

        confidence *= characteristics.distribution_score
        depth = path_depth(path)
        if depth > 1:
            confidence *= DEPTH_DECAY ** (depth - 1)

        suggestions.append(FieldSuggestion(
            field=path,
            type=type_info.type,
            confidence=min(MAX_CONFIDENCE, max(MIN_CONFIDENCE, confidence)),
            suggested_role=role,
        ))

    suggestions.sort(key=lambda s: s.confidence, reverse=True)
    return suggestions


def suggest_best_mapping(records: Sequence[Dict[str, Any]], sample_size: Optional[int] = None) -> Optional[Dict[str, str]]:
    """
    Pick a simple x/y pair from the top-level fields.

    Starts from the first two fields, and fills any gap with the first
    string-typed (x) or number-typed (y) field in a small sample.
    """
    if not records or not isinstance(records[0], dict):
        return None

    sample = list(records[:sample_size or settings.VALIDATION_SAMPLE_SIZE])
    fields = list(records[0].keys())
    x_field = fields[0] if len(fields) > 0 else None
    y_field = fields[1] if len(fields) > 1 else None

    for field in fields:
        if x_field and y_field:
            break
        data_type = detect_column_type([row.get(field) for row in sample if isinstance(row, dict)]).type
        if data_type == DataType.STRING and not x_field:
            x_field = field
        if data_type == DataType.NUMBER and not y_field and field != x_field:
            y_field = field

    if x_field and y_field:
        return {"x": x_field, "y": y_field}
    return None
