from .base import BaseAdapter
from .csv_adapter import CsvAdapter
from .nested_adapter import NestedAdapter
from .time_series_adapter import TimeSeriesAdapter
from .pivot_adapter import PivotAdapter
from .factory import AdapterKind, create_adapter, adapter_for_filename, detect_adapter, detect_adapter_kind

__all__ = [
    "BaseAdapter",
    "CsvAdapter",
    "NestedAdapter",
    "TimeSeriesAdapter",
    "PivotAdapter",
    "AdapterKind",
    "create_adapter",
    "adapter_for_filename",
    "detect_adapter",
    "detect_adapter_kind",
]
