"""Unit tests for the CSV adapter."""

from datetime import datetime

import pytest

from chartdata.adapters.csv_adapter import CsvAdapter


@pytest.fixture
def adapter():
    return CsvAdapter()


def test_parse_simple():
    """Test a header plus one row."""
    assert CsvAdapter.parse_csv("a,b\n1,2") == [{"a": 1, "b": 2}]


def test_parse_quoted_delimiter():
    """Test that a delimiter inside quotes is kept."""
    assert CsvAdapter.parse_csv_line('"x, y",2') == ["x, y", "2"]
    assert CsvAdapter.parse_csv('note\n"x, y"') == [{"note": "x, y"}]


def test_parse_escaped_quote():
    """Test doubled quotes inside a quoted cell."""
    assert CsvAdapter.parse_csv('a\n"say ""hi"""') == [{"a": 'say "hi"'}]


def test_parse_without_header():
    """Test generated column names."""
    assert CsvAdapter.parse_csv("x,1\ny,2", has_header=False) == [
        {"column_1": "x", "column_2": 1},
        {"column_1": "y", "column_2": 2},
    ]


def test_parse_line_endings_and_blank_lines():
    """Test CRLF input and blank-line handling."""
    text = "a,b\r\n\r\n1,2\r\n"
    assert CsvAdapter.parse_csv(text) == [{"a": 1, "b": 2}]
    assert CsvAdapter.parse_csv("a,b\n\n1,2", skip_empty_lines=False) == [
        {"a": None, "b": None},
        {"a": 1, "b": 2},
    ]


def test_parse_short_rows_fill_none():
    """Test that missing trailing cells become None."""
    assert CsvAdapter.parse_csv("a,b,c\n1") == [{"a": 1, "b": None, "c": None}]


def test_parse_empty_text():
    """Test empty input."""
    assert CsvAdapter.parse_csv("") == []
    assert CsvAdapter.parse_csv("\n\n") == []


def test_infer_value():
    """Test per-cell type inference."""
    assert CsvAdapter.infer_value("") is None
    assert CsvAdapter.infer_value("TRUE") is True
    assert CsvAdapter.infer_value("false") is False
    assert CsvAdapter.infer_value("$1,200") == 1200
    assert CsvAdapter.infer_value("3.5") == 3.5
    assert CsvAdapter.infer_value("2024-01-15") == datetime(2024, 1, 15)
    assert CsvAdapter.infer_value("1/15/2024") == datetime(2024, 1, 15)
    assert CsvAdapter.infer_value("hello") == "hello"


def test_tab_delimiter():
    """Test the delimiter option."""
    adapter = CsvAdapter(delimiter="\t")
    assert adapter.parse("a\tb\n1\t2") == [{"a": 1, "b": 2}]


def test_transform(adapter, sales_csv):
    """Test parse then transform."""
    records = adapter.parse(sales_csv)
    points = adapter.transform(records, {"x": "name", "y": "sales", "color": "region"})
    assert [(p.x, p.y, p.color) for p in points][:2] == [("Alice", 100.0, "North"), ("Bob", 200.0, "South")]
    assert len(points) == 4


def test_validate_clean_data(adapter, sales_records):
    """Test that clean data validates with the CSV confidence cap."""
    result = adapter.validate(sales_records)
    assert result.is_valid is True
    assert result.warnings == []
    assert result.confidence == 0.9


def test_validate_unparsable_numbers(adapter):
    """Test that bad values in a numeric column are listed."""
    records = [{"v": 1}, {"v": 2}, {"v": 3}, {"v": "n/a"}]
    result = adapter.validate(records)
    assert result.is_valid is True
    assert any("unparsable values: n/a" in w for w in result.warnings)


def test_validate_truncates_listed_values(adapter):
    """Test that at most three bad values are listed."""
    records = [{"v": i} for i in range(20)] + [{"v": s} for s in ("a", "b", "c", "d")]
    result = adapter.validate(records)
    assert any(w.endswith("a, b, c...") for w in result.warnings)


def test_validate_mixed_types(adapter):
    """Test the low type-confidence warning."""
    records = [{"v": 1}, {"v": "x"}, {"v": "y"}, {"v": 2}, {"v": "z"}]
    result = adapter.validate(records)
    assert any("inconsistent value types" in w for w in result.warnings)


def test_validate_blank_header(adapter):
    """Test the empty column name warning."""
    result = adapter.validate([{"": 1, "b": 2}])
    assert any("empty column names" in w for w in result.warnings)


def test_validate_empty(adapter):
    """Test the empty list result."""
    result = adapter.validate([])
    assert result.is_valid is True
    assert result.confidence == 0.5
