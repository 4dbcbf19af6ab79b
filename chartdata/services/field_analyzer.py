"""
Field Analyzer

Scores how a field is likely to be used in a chart from two signals: the
keywords in its (dotted) name and the distribution of its values.
"""

import logging
from dataclasses import dataclass
from typing import Any, Hashable, Optional, Sequence, Tuple

import numpy as np
from scipy import stats

from ..models.mapping import DataType, MappingRole
from ..utils import coerce_number, parse_time_value, strip_number_symbols, to_millis

logger = logging.getLogger("chartdata.field_analyzer")

DAY_MS = 24 * 60 * 60 * 1000

VALUE_KEYWORDS = ("value", "amount", "price", "cost", "revenue", "sales", "count", "total", "sum", "avg", "mean")
SIZE_KEYWORDS = ("size", "radius", "width", "height", "length", "area", "volume")
INDEX_KEYWORDS = ("index", "id", "key", "position", "rank", "order")
CATEGORY_KEYWORDS = ("category", "type", "class", "group", "status", "state", "color")
LABEL_KEYWORDS = ("name", "title", "label", "description", "text")


@dataclass
class FieldCharacteristics:
    """Name-based hints plus the value distribution score of a field."""
    is_value_field: bool
    is_size_field: bool
    is_index_field: bool
    is_category_field: bool
    is_label_field: bool
    distribution_score: float


def analyze_field(field: str, values: Sequence[Any], data_type: DataType) -> FieldCharacteristics:
    lowered = field.lower()
    return FieldCharacteristics(
        is_value_field=_contains_any(lowered, VALUE_KEYWORDS),
        is_size_field=_contains_any(lowered, SIZE_KEYWORDS),
        is_index_field=_contains_any(lowered, INDEX_KEYWORDS),
        is_category_field=_contains_any(lowered, CATEGORY_KEYWORDS),
        is_label_field=_contains_any(lowered, LABEL_KEYWORDS),
        distribution_score=distribution_score(values, data_type),
    )


def suggest_role(data_type: DataType, characteristics: FieldCharacteristics) -> Tuple[MappingRole, float]:
    """Pick an encoding role and its base confidence (before distribution/depth scaling)."""
    if data_type == DataType.NUMBER:
        if characteristics.is_value_field:
            return MappingRole.Y, 0.9
        if characteristics.is_size_field:
            return MappingRole.SIZE, 0.8
        if characteristics.is_index_field:
            return MappingRole.X, 0.7
        return MappingRole.Y, 0.6

    if data_type == DataType.DATE:
        return MappingRole.X, 0.95

    if data_type == DataType.STRING:
        if characteristics.is_category_field:
            return MappingRole.COLOR, 0.8
        if characteristics.is_label_field:
            return MappingRole.X, 0.7
        return MappingRole.X, 0.5

    return MappingRole.COLOR, 0.6


def distribution_score(values: Sequence[Any], data_type: DataType) -> float:
    """
    Score in [0.1, 1] rewarding value spreads that chart well.

    number: moderate coefficient of variation and a non-zero range
    string: moderate uniqueness and 2-20 distinct categories
    date: a span of more than one day
    """
    if len(values) == 0:
        return 0.5

    score = 0.5

    if data_type == DataType.NUMBER:
        numbers = np.array([n for n in (_to_number(v) for v in values) if n is not None], dtype=float)
        numbers = numbers[np.isfinite(numbers)]
        if len(numbers) > 0:
            if float(np.mean(numbers)) != 0:
                cv = float(stats.variation(numbers))
                if 0.05 < cv < 3:
                    score += 0.3
            if float(np.max(numbers) - np.min(numbers)) > 0:
                score += 0.2

    elif data_type == DataType.STRING:
        unique = len({hashable_key(v) for v in values})
        unique_ratio = unique / len(values)
        if 0.1 < unique_ratio < 0.8:
            score += 0.3
        if 2 <= unique <= 20:
            score += 0.2

    elif data_type == DataType.DATE:
        stamps = [to_millis(d) for d in (parse_time_value(v) for v in values) if d is not None]
        if len(stamps) > 1 and max(stamps) - min(stamps) > DAY_MS:
            score += 0.4

    return min(1.0, max(0.1, score))


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, str):
        return coerce_number(strip_number_symbols(value))
    return coerce_number(value)


def hashable_key(value: Any) -> Hashable:
    try:
        hash(value)
        return value
    except TypeError:
        return ("__object__", id(value))


def _contains_any(text: str, keywords: Sequence[str]) -> bool:
    return any(keyword in text for keyword in keywords)
