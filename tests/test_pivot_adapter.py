"""Unit tests for the pivot adapter."""

import logging
import math

import pytest

from chartdata.adapters.pivot_adapter import PivotAdapter, aggregate, has_consistent_column_pattern
from chartdata.models.pivot import AggregateFunction, PivotConfig, PivotType


@pytest.fixture
def adapter():
    return PivotAdapter()


@pytest.fixture
def long_records():
    return [
        {"region": "North", "quarter": "q1", "sales": 10},
        {"region": "North", "quarter": "q2", "sales": 20},
        {"region": "South", "quarter": "q1", "sales": 5},
    ]


def test_region_quarters_end_to_end(adapter, wide_records):
    """Test value column detection and the wide-to-long reshape."""
    assert adapter.identify_value_columns(wide_records) == ["q1", "q2", "q3", "q4"]

    analysis = adapter.analyze_pivotability(wide_records)
    assert analysis.is_wide_format is True
    assert analysis.identifier_columns == ["region"]
    assert analysis.confidence == pytest.approx(1.0)

    rows = adapter.perform_pivot(wide_records, PivotConfig(type=PivotType.WIDE_TO_LONG))
    assert len(rows) == 20
    assert all({"region", "variable", "value"} <= set(row) for row in rows)
    assert rows[0] == {"region": "North", "variable": "q1", "value": 10.0, "_originalIndex": 0}
    assert rows[-1]["_originalIndex"] == 4


def test_wide_to_long_row_count(adapter, wide_records):
    """Test n rows x m value columns."""
    config = PivotConfig(type=PivotType.WIDE_TO_LONG, value_columns=["q1", "q3"], id_columns=["region"],
                         variable_name="quarter", value_name="amount")
    rows = adapter.wide_to_long(wide_records, config)
    assert len(rows) == len(wide_records) * 2
    assert rows[1] == {"region": "North", "quarter": "q3", "amount": 14.0, "_originalIndex": 0}


def test_long_to_wide(adapter, long_records):
    """Test key values becoming columns per id group."""
    config = PivotConfig(type=PivotType.LONG_TO_WIDE, key_field="quarter", value_field="sales", id_columns=["region"])
    assert adapter.perform_pivot(long_records, config) == [
        {"region": "North", "q1": 10.0, "q2": 20.0},
        {"region": "South", "q1": 5.0},
    ]


def test_long_to_wide_requires_fields(adapter, long_records):
    """Test that an incomplete config leaves rows unchanged."""
    config = PivotConfig(type=PivotType.LONG_TO_WIDE, id_columns=["region"])
    assert adapter.perform_pivot(long_records, config) == long_records


def test_group_by_keeps_original_key_values(adapter):
    """Test aggregation with non-string group keys."""
    records = [
        {"year": 2023, "sales": 10},
        {"year": 2023, "sales": 30},
        {"year": 2024, "sales": 5},
    ]
    config = PivotConfig(type=PivotType.GROUP_BY, group_by_fields=["year"], aggregate_fields=["sales"],
                         aggregate_function=AggregateFunction.AVG)
    assert adapter.perform_pivot(records, config) == [{"year": 2023, "sales": 20.0}, {"year": 2024, "sales": 5.0}]


@pytest.mark.parametrize(
    "function, expected",
    [("sum", 6.0), ("avg", 2.0), ("max", 3.0), ("min", 1.0), ("count", 3)],
)
def test_aggregate_functions(function, expected):
    """Test every reducer."""
    assert aggregate([1.0, 2.0, 3.0], function) == expected


def test_aggregate_empty_is_zero():
    """Test the default for no valid values."""
    assert aggregate([], AggregateFunction.MAX) == 0


def test_group_by_filters_nan(adapter):
    """Test that NaN values are left out of the reduction."""
    records = [{"g": "a", "v": 4}, {"g": "a", "v": float("nan")}, {"g": "b", "v": float("nan")}]
    config = PivotConfig(type=PivotType.GROUP_BY, group_by_fields=["g"], aggregate_fields=["v"],
                         aggregate_function=AggregateFunction.COUNT)
    assert adapter.group_by(records, config) == [{"g": "a", "v": 1}, {"g": "b", "v": 0}]


def test_transform_with_pivot_config(adapter, wide_records):
    """Test pivoting inside transform with a dict config."""
    config = {
        "x": "variable",
        "y": "value",
        "color": "region",
        "pivot_config": {"type": "wide-to-long", "value_columns": ["q1", "q2", "q3", "q4"], "id_columns": ["region"]},
    }
    points = adapter.transform(wide_records, config)
    assert len(points) == 20
    assert points[0].y == 10.0
    assert points[0].color == "North"
    assert "pivot_config" not in points[0].extra


@pytest.mark.parametrize(
    "pivot_config",
    [{"type": "sideways"}, {"type": "group-by", "aggregate_function": "median"}],
)
def test_transform_ignores_invalid_pivot_config(adapter, wide_records, pivot_config, caplog):
    """Test that an unreadable pivot config is logged and the rows are mapped unpivoted."""
    with caplog.at_level(logging.DEBUG, logger="chartdata.adapters.pivot"):
        points = adapter.transform(wide_records, {"x": "region", "y": "q1", "pivot_config": pivot_config})

    assert [p.y for p in points] == [10.0, 20.0, 5.0, 30.0, 15.0]
    assert any("invalid pivot_config" in r.getMessage() for r in caplog.records if r.levelno == logging.WARNING)


def test_transform_with_string_tagged_config(adapter, wide_records):
    """Test a PivotConfig built from plain string tags."""
    config = PivotConfig(type="wide-to-long", value_columns=["q1", "q2"], id_columns=["region"])
    assert config.type == PivotType.WIDE_TO_LONG
    assert config.aggregate_function == AggregateFunction.SUM

    points = adapter.transform(wide_records, {"x": "variable", "y": "value", "pivot_config": config})
    assert len(points) == 10
    assert [p.y for p in points[:2]] == [10.0, 12.0]


def test_pivot_config_rejects_unknown_tags():
    """Test that unknown string tags fail at construction."""
    with pytest.raises(ValueError):
        PivotConfig(type="sideways")
    with pytest.raises(ValueError):
        PivotConfig(type="group-by", aggregate_function="median")


@pytest.mark.parametrize("function, expected", [(AggregateFunction.AVG, 10.0), (AggregateFunction.COUNT, 1)])
def test_group_by_skips_missing_values(adapter, function, expected):
    """Test that absent and None values are left out of the reduction."""
    records = [{"g": "a", "v": 10}, {"g": "a"}, {"g": "a", "v": None}]
    config = PivotConfig(type=PivotType.GROUP_BY, group_by_fields=["g"], aggregate_fields=["v"],
                         aggregate_function=function)
    assert adapter.group_by(records, config) == [{"g": "a", "v": expected}]


def test_pivot_config_from_dict():
    """Test dict conversion and defaults."""
    config = PivotConfig.from_dict({"type": "group-by", "group_by_fields": ["a"]})
    assert config.type == PivotType.GROUP_BY
    assert config.aggregate_function == AggregateFunction.SUM
    assert config.variable_name == "variable"
    with pytest.raises(ValueError):
        PivotConfig.from_dict({"type": "group-by", "aggregate_function": "median"})


def test_long_data_is_not_wide(adapter, long_records):
    """Test analysis of already long data."""
    analysis = adapter.analyze_pivotability(long_records)
    assert analysis.is_wide_format is False
    assert analysis.value_columns == ["sales"]
    assert adapter.suggest_pivot_config(long_records) is None


def test_count_duplicate_key_pairs(adapter):
    """Test duplicate identifier counting."""
    records = [{"region": "N", "v": 1}, {"region": "N", "v": 2}, {"region": "N", "v": 3}, {"region": "S", "v": 4}]
    assert adapter.count_duplicate_key_pairs(records, ["region"]) == 2
    assert adapter.count_duplicate_key_pairs(records, []) == 0


def test_validate(adapter, wide_records):
    """Test the wide-format warning and confidence."""
    result = adapter.validate(wide_records)
    assert result.is_valid is True
    assert result.confidence == 0.75
    assert any("wide table" in w for w in result.warnings)


def test_validate_duplicates(adapter):
    """Test the duplicate identifier warning."""
    records = [{"region": "N", "v": 1}, {"region": "N", "v": 2}]
    result = adapter.validate(records)
    assert any("1 duplicate identifier" in w for w in result.warnings)


def test_suggest_pivot_config(adapter, wide_records):
    """Test the suggested reshape for wide data."""
    config = adapter.suggest_pivot_config(wide_records)
    assert config.type == PivotType.WIDE_TO_LONG
    assert config.value_columns == ["q1", "q2", "q3", "q4"]
    assert config.id_columns == ["region"]


def test_suggest_auto_mapping(adapter, wide_records, long_records):
    """Test the variable/value line mapping for wide data."""
    suggestion = adapter.suggest_auto_mapping(wide_records)
    assert suggestion.mapping == {"x": "variable", "y": "value"}
    assert suggestion.chart_type == "line"
    assert adapter.suggest_auto_mapping(long_records) is None


def test_column_patterns():
    """Test naming pattern detection."""
    assert has_consistent_column_pattern(["sales_2021", "sales_2022", "sales_2023"])
    assert has_consistent_column_pattern(["Jan", "Feb", "Mar"])
    assert not has_consistent_column_pattern(["alpha", "beta", "gamma"])
    assert not has_consistent_column_pattern(["q1", "q2"])


def test_nan_cleaning_passes_through():
    """Test that NaN survives clean_number so aggregation can drop it."""
    assert math.isnan(PivotAdapter.clean_number(float("nan")))
