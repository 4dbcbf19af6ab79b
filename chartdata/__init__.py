"""
chartdata - turns raw records into chart-ready points.

Type detection, field-role suggestions, chart-type suggestions and the
CSV / nested / time-series / pivot adapters.
"""

from .adapters import (
    AdapterKind,
    BaseAdapter,
    CsvAdapter,
    NestedAdapter,
    PivotAdapter,
    TimeSeriesAdapter,
    adapter_for_filename,
    create_adapter,
    detect_adapter,
)
from .models import ChartDataPoint, DataType, MappingRole, PivotConfig, RowErrorPolicy, ValidationResult
from .services import detect_column_type, suggest_chart_type, suggest_mapping

__all__ = [
    "AdapterKind",
    "BaseAdapter",
    "CsvAdapter",
    "NestedAdapter",
    "PivotAdapter",
    "TimeSeriesAdapter",
    "adapter_for_filename",
    "create_adapter",
    "detect_adapter",
    "ChartDataPoint",
    "DataType",
    "MappingRole",
    "PivotConfig",
    "RowErrorPolicy",
    "ValidationResult",
    "detect_column_type",
    "suggest_chart_type",
    "suggest_mapping",
]
