"""
Chart Type Suggester

Classifies the top-level fields of a record set into numeric, categorical
and date groups and proposes chart categories with fixed confidences.
"""

import logging
from typing import Any, Dict, List, Sequence

from ..models.mapping import ChartSuggestion, DataType
from .field_analyzer import hashable_key
from .type_detector import detect_column_type

logger = logging.getLogger("chartdata.chart_suggester")

MAX_PIE_CATEGORIES = 8


def classify_fields(records: Sequence[Dict[str, Any]]) -> Dict[DataType, List[str]]:
    """Group the first record's fields by detected type, preserving field order."""
    groups: Dict[DataType, List[str]] = {t: [] for t in DataType}
    if not records or not isinstance(records[0], dict):
        return groups

    for field in records[0].keys():
        values = [row.get(field) if isinstance(row, dict) else None for row in records]
        groups[detect_column_type(values).type].append(field)
    return groups


def suggest_chart_type(records: Sequence[Dict[str, Any]]) -> List[ChartSuggestion]:
    if not records:
        return []

    groups = classify_fields(records)
    numeric = groups[DataType.NUMBER]
    categorical = groups[DataType.STRING]
    dates = groups[DataType.DATE]

    suggestions: List[ChartSuggestion] = []

    if categorical and numeric:
        suggestions.append(ChartSuggestion(
            type="bar-chart",
            confidence=0.9,
            reason="Compares numeric values across categories",
            suggested_props={"x_key": categorical[0], "y_key": numeric[0]},
        ))

    if dates and numeric:
        suggestions.append(ChartSuggestion(
            type="line-chart",
            confidence=0.9,
            reason="Shows how a numeric value changes over time",
            suggested_props={"x_key": dates[0], "y_key": numeric[0]},
        ))

    if len(numeric) >= 2:
        suggestions.append(ChartSuggestion(
            type="scatter-plot",
            confidence=0.8,
            reason="Shows the relationship between two numeric variables",
            suggested_props={
                "x_key": numeric[0],
                "y_key": numeric[1],
                "color_key": categorical[0] if categorical else None,
            },
        ))

    if categorical and numeric:
        categories = {hashable_key(row.get(categorical[0])) for row in records if isinstance(row, dict)}
        if len(categories) <= MAX_PIE_CATEGORIES:
            suggestions.append(ChartSuggestion(
                type="pie-chart",
                confidence=0.7,
                reason="Shows each category's share of the total",
                suggested_props={"category_key": categorical[0], "value_key": numeric[0]},
            ))

    suggestions.sort(key=lambda s: s.confidence, reverse=True)
    logger.debug("suggest_chart_type: %s", [s.type for s in suggestions])
    return suggestions
