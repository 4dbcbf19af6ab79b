"""
Pivot reshaping configuration and analysis types.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class PivotType(str, enum.Enum):
    """Supported reshape operations."""
    WIDE_TO_LONG = "wide-to-long"
    LONG_TO_WIDE = "long-to-wide"
    GROUP_BY = "group-by"


class AggregateFunction(str, enum.Enum):
    SUM = "sum"
    AVG = "avg"
    MAX = "max"
    MIN = "min"
    COUNT = "count"


@dataclass
class PivotConfig:
    """
    Tagged reshape configuration.

    Which fields matter depends on ``type``:
      - wide-to-long: value_columns, id_columns, variable_name, value_name
      - long-to-wide: key_field, value_field, id_columns
      - group-by: group_by_fields, aggregate_fields, aggregate_function
    """
    type: PivotType
    value_columns: Optional[List[str]] = None
    id_columns: Optional[List[str]] = None
    variable_name: str = "variable"
    value_name: str = "value"
    key_field: Optional[str] = None
    value_field: Optional[str] = None
    group_by_fields: List[str] = field(default_factory=list)
    aggregate_fields: List[str] = field(default_factory=list)
    aggregate_function: AggregateFunction = AggregateFunction.SUM

    def __post_init__(self):
        # Accept the plain string tags; unknown tags raise ValueError.
        self.type = PivotType(self.type)
        self.aggregate_function = AggregateFunction(self.aggregate_function)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PivotConfig":
        """Build a config from a plain dict; raises ValueError on an unknown type."""
        pivot_type = PivotType(data.get("type"))
        aggregate = data.get("aggregate_function") or AggregateFunction.SUM
        return cls(
            type=pivot_type,
            value_columns=data.get("value_columns"),
            id_columns=data.get("id_columns"),
            variable_name=data.get("variable_name") or "variable",
            value_name=data.get("value_name") or "value",
            key_field=data.get("key_field"),
            value_field=data.get("value_field"),
            group_by_fields=list(data.get("group_by_fields") or []),
            aggregate_fields=list(data.get("aggregate_fields") or []),
            aggregate_function=AggregateFunction(aggregate),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "value_columns": self.value_columns,
            "id_columns": self.id_columns,
            "variable_name": self.variable_name,
            "value_name": self.value_name,
            "key_field": self.key_field,
            "value_field": self.value_field,
            "group_by_fields": list(self.group_by_fields),
            "aggregate_fields": list(self.aggregate_fields),
            "aggregate_function": self.aggregate_function.value,
        }


@dataclass
class PivotAnalysis:
    """How well a record set fits a wide-to-long reshape."""
    is_wide_format: bool
    confidence: float
    value_columns: List[str] = field(default_factory=list)
    identifier_columns: List[str] = field(default_factory=list)
    has_multiple_value_columns: bool = False
    duplicate_key_pairs: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_wide_format": self.is_wide_format,
            "confidence": self.confidence,
            "value_columns": list(self.value_columns),
            "identifier_columns": list(self.identifier_columns),
            "has_multiple_value_columns": self.has_multiple_value_columns,
            "duplicate_key_pairs": self.duplicate_key_pairs,
        }
