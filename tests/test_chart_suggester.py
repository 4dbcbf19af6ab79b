"""Unit tests for chart type suggestions."""

from chartdata.models.mapping import DataType
from chartdata.services.chart_suggester import classify_fields, suggest_chart_type


def test_classify_fields(sales_records):
    """Test field grouping by detected type."""
    groups = classify_fields(sales_records)
    assert groups[DataType.STRING] == ["name", "region"]
    assert groups[DataType.NUMBER] == ["sales"]


def test_bar_and_pie_for_categories(sales_records):
    """Test categorical plus numeric data."""
    suggestions = suggest_chart_type(sales_records)
    types = [s.type for s in suggestions]
    assert types == ["bar-chart", "pie-chart"]
    assert suggestions[0].suggested_props == {"x_key": "name", "y_key": "sales"}
    assert suggestions[1].suggested_props == {"category_key": "name", "value_key": "sales"}


def test_line_chart_for_dates(daily_records):
    """Test date plus numeric data."""
    suggestions = suggest_chart_type(daily_records)
    assert suggestions[0].type == "line-chart"
    assert suggestions[0].confidence == 0.9


def test_scatter_for_two_numbers():
    """Test that two numeric fields give a scatter plot."""
    records = [{"height": 170, "weight": 65}, {"height": 180, "weight": 80}]
    suggestions = suggest_chart_type(records)
    assert [s.type for s in suggestions] == ["scatter-plot"]
    assert suggestions[0].suggested_props["color_key"] is None


def test_no_pie_for_many_categories():
    """Test the pie chart category limit."""
    records = [{"name": f"item{i}", "count": i} for i in range(9)]
    types = [s.type for s in suggest_chart_type(records)]
    assert "pie-chart" not in types
    assert "bar-chart" in types


def test_empty():
    """Test empty input."""
    assert suggest_chart_type([]) == []
