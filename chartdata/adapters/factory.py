"""
Adapter factory.

Selects an adapter from what the caller knows: an explicit kind, a file
name, or the shape of already-decoded records.
"""

import enum
import logging
import os
from typing import Any, Dict, Optional, Sequence, Type, Union

from ..core.config import settings
from .base import BaseAdapter
from .csv_adapter import CsvAdapter
from .nested_adapter import NestedAdapter
from .pivot_adapter import PivotAdapter
from .time_series_adapter import TimeSeriesAdapter

logger = logging.getLogger("chartdata.adapters.factory")

NESTED_DEPTH_THRESHOLD = 2


class AdapterKind(str, enum.Enum):
    CSV = "csv"
    NESTED = "nested"
    TIME_SERIES = "time-series"
    PIVOT = "pivot"


ADAPTER_CLASSES: Dict[AdapterKind, Type[BaseAdapter]] = {
    AdapterKind.CSV: CsvAdapter,
    AdapterKind.NESTED: NestedAdapter,
    AdapterKind.TIME_SERIES: TimeSeriesAdapter,
    AdapterKind.PIVOT: PivotAdapter,
}

_EXTENSIONS: Dict[str, tuple] = {
    ".csv": (AdapterKind.CSV, {}),
    ".tsv": (AdapterKind.CSV, {"delimiter": "\t"}),
    ".json": (AdapterKind.NESTED, {}),
    ".jsonl": (AdapterKind.NESTED, {}),
}


def create_adapter(kind: Union[AdapterKind, str], **options: Any) -> BaseAdapter:
    """
    Build an adapter by kind. ``options`` go to the adapter constructor
    (``delimiter`` for csv, ``row_error_policy`` for all).

    Raises ValueError for an unknown kind.
    """
    try:
        adapter_kind = AdapterKind(kind)
    except ValueError:
        raise ValueError(f"Unknown adapter kind: {kind}")
    return ADAPTER_CLASSES[adapter_kind](**options)


def adapter_for_filename(filename: str, **options: Any) -> BaseAdapter:
    """Pick an adapter from a file extension; raises ValueError when unsupported."""
    extension = os.path.splitext(filename)[1].lower()
    if extension not in _EXTENSIONS:
        raise ValueError(f"Unsupported file type: {extension or filename}")
    kind, defaults = _EXTENSIONS[extension]
    return create_adapter(kind, **{**defaults, **options})


def detect_adapter_kind(records: Sequence[Dict[str, Any]]) -> AdapterKind:
    """
    Choose the adapter that fits the record shape best.

    nested when any sampled record is more than two levels deep, pivot
    when a wide-to-long reshape is clearly indicated, time-series when a
    time field exists and validates, csv otherwise.
    """
    if not records:
        return AdapterKind.CSV

    nested = NestedAdapter()
    sample = records[:settings.VALIDATION_SAMPLE_SIZE]
    if any(nested.get_object_depth(row) > NESTED_DEPTH_THRESHOLD for row in sample):
        return AdapterKind.NESTED

    if PivotAdapter().suggest_pivot_config(records) is not None:
        return AdapterKind.PIVOT

    time_series = TimeSeriesAdapter()
    if time_series.find_time_fields(records) and time_series.validate(records).is_valid:
        return AdapterKind.TIME_SERIES

    return AdapterKind.CSV


def detect_adapter(records: Sequence[Dict[str, Any]], **options: Any) -> BaseAdapter:
    kind = detect_adapter_kind(records)
    logger.info("detect_adapter: selected %s for %d records", kind.value, len(records))
    return create_adapter(kind, **options)


def resolve_kind(kind: str) -> Optional[AdapterKind]:
    """AdapterKind for ``kind`` or None when it is not a known kind."""
    try:
        return AdapterKind(kind)
    except ValueError:
        return None
