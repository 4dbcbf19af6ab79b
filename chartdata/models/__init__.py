from .mapping import (
    DataType,
    MappingRole,
    RowErrorPolicy,
    MappingConfig,
    ColumnTypeInfo,
    FieldSuggestion,
    MappingSuggestion,
    ChartSuggestion,
    ChartDataPoint,
    ValidationResult,
    NestingComplexity,
    FlatteningSuggestion,
)
from .pivot import PivotType, AggregateFunction, PivotConfig, PivotAnalysis

__all__ = [
    "DataType",
    "MappingRole",
    "RowErrorPolicy",
    "MappingConfig",
    "ColumnTypeInfo",
    "FieldSuggestion",
    "MappingSuggestion",
    "ChartSuggestion",
    "ChartDataPoint",
    "ValidationResult",
    "NestingComplexity",
    "FlatteningSuggestion",
    "PivotType",
    "AggregateFunction",
    "PivotConfig",
    "PivotAnalysis",
]
