"""Unit tests for column type detection."""

from datetime import datetime

import pytest

from chartdata.models.mapping import DataType
from chartdata.services.type_detector import detect_column_type, detect_data_type


def test_iso_date_column():
    """Test that ISO date strings are detected with full confidence."""
    info = detect_column_type(["2024-01-01", "2024-02-01", "2024-03-15"])
    assert info.type == DataType.DATE
    assert info.confidence == 1.0
    assert info.subtype == "iso-date"
    assert info.format == "YYYY-MM-DD"


def test_half_numeric_column():
    """Test that a half-numeric column scores about 0.5."""
    info = detect_column_type(["10", "20", "apple", "banana"])
    assert info.type == DataType.NUMBER
    assert info.confidence == pytest.approx(0.5)


def test_currency_column():
    """Test currency formatted numbers."""
    info = detect_column_type(["$1,200.50", "$300", "$45.99"])
    assert info.type == DataType.NUMBER
    assert info.confidence == 1.0
    assert info.subtype == "currency-usd"


def test_boolean_words():
    """Test yes/no columns."""
    info = detect_column_type(["yes", "no", "Yes"])
    assert info.type == DataType.BOOLEAN
    assert info.confidence == 1.0


def test_zero_one_numbers_prefer_number():
    """Test that a number/boolean tie resolves to number."""
    assert detect_data_type([0, 1, 1, 0]) == DataType.NUMBER


def test_unix_seconds_prefer_date():
    """Test that plausible unix timestamps are dates."""
    info = detect_column_type([1700000000, 1700086400])
    assert info.type == DataType.DATE
    assert info.subtype == "unix-seconds"


def test_datetime_instances():
    """Test native datetime values."""
    assert detect_data_type([datetime(2024, 1, 1), datetime(2024, 1, 2)]) == DataType.DATE


def test_free_text():
    """Test plain text falls back to string."""
    info = detect_column_type(["apple", "banana", "cherry"])
    assert info.type == DataType.STRING
    assert info.confidence == 0.9
    assert info.subtype == "text"


def test_empty_and_all_null():
    """Test that empty input is a low-confidence string."""
    empty = detect_column_type([])
    assert empty.type == DataType.STRING
    assert empty.confidence == 0.5

    nulls = detect_column_type([None, float("nan")])
    assert nulls.type == DataType.STRING
    assert nulls.confidence == 0.5
    assert nulls.null_count == 2


def test_samples_and_null_count():
    """Test that samples are the first five non-null values."""
    info = detect_column_type([1, None, 2, 3, 4, 5, 6, float("nan")])
    assert info.samples == [1, 2, 3, 4, 5]
    assert info.null_count == 2


def test_to_dict_serializes_enum():
    """Test dict output uses the enum value."""
    assert detect_column_type(["a"]).to_dict()["type"] == "string"


def test_integers_beyond_float_range():
    """Test that huge JSON integers are detected as integers."""
    info = detect_column_type([10**400, 5])
    assert info.type == DataType.NUMBER
    assert info.subtype == "integer"
