"""Unit tests for field analysis and mapping suggestions."""

from chartdata.adapters.csv_adapter import CsvAdapter
from chartdata.models.mapping import DataType, MappingRole
from chartdata.services.field_analyzer import analyze_field, distribution_score, suggest_role
from chartdata.services.mapping_suggester import suggest_best_mapping, suggest_mapping


def test_value_keyword_suggests_y():
    """Test that a numeric value-named field maps to y."""
    characteristics = analyze_field("total_sales", [1, 2, 3], DataType.NUMBER)
    assert characteristics.is_value_field
    assert suggest_role(DataType.NUMBER, characteristics) == (MappingRole.Y, 0.9)


def test_role_table():
    """Test base roles per type and name hint."""
    assert suggest_role(DataType.DATE, analyze_field("when", [], DataType.DATE))[0] == MappingRole.X
    assert suggest_role(DataType.STRING, analyze_field("category", ["a"], DataType.STRING)) == (MappingRole.COLOR, 0.8)
    assert suggest_role(DataType.NUMBER, analyze_field("radius", [1], DataType.NUMBER)) == (MappingRole.SIZE, 0.8)
    assert suggest_role(DataType.BOOLEAN, analyze_field("flag", [True], DataType.BOOLEAN)) == (MappingRole.COLOR, 0.6)


def test_distribution_score_bounds():
    """Test that spread rewards and constant columns stay neutral."""
    assert distribution_score([5, 5, 5], DataType.NUMBER) == 0.5
    assert distribution_score([10, 20, 30], DataType.NUMBER) == 1.0
    assert distribution_score(["2024-01-01", "2024-03-01"], DataType.DATE) == 0.9
    assert distribution_score([], DataType.STRING) == 0.5


def test_suggestions_sorted_and_bounded(nested_records):
    """Test ordering and confidence range over nested paths."""
    suggestions = suggest_mapping(nested_records)
    confidences = [s.confidence for s in suggestions]
    assert confidences == sorted(confidences, reverse=True)
    assert all(0.1 <= c <= 0.95 for c in confidences)

    fields = [s.field for s in suggestions]
    assert "user.profile.age" in fields
    assert "metrics.value" in fields


def test_depth_decays_confidence():
    """Test that the same field scores lower when nested."""
    flat = suggest_mapping([{"amount": 1}, {"amount": 5}, {"amount": 9}])
    nested = suggest_mapping([{"a": {"amount": 1}}, {"a": {"amount": 5}}, {"a": {"amount": 9}}])
    nested_amount = next(s for s in nested if s.field == "a.amount")
    assert nested_amount.confidence < flat[0].confidence


def test_sales_ranked_above_name(sales_csv):
    """Test the name/sales table end to end from CSV text."""
    records = CsvAdapter.parse_csv(sales_csv)
    suggestions = suggest_mapping(records)
    by_field = {s.field: s for s in suggestions}

    assert by_field["sales"].suggested_role == MappingRole.Y
    assert by_field["name"].suggested_role == MappingRole.X
    assert suggestions.index(by_field["sales"]) < suggestions.index(by_field["name"])


def test_self_referencing_record_terminates():
    """Test that cyclic records do not recurse forever."""
    record = {"a": 1}
    record["self"] = record
    fields = [s.field for s in suggest_mapping([record])]
    assert sorted(fields) == ["a", "self"]


def test_empty_records():
    """Test empty input."""
    assert suggest_mapping([]) == []
    assert suggest_best_mapping([]) is None


def test_best_mapping(sales_records):
    """Test the simple x/y pick uses the leading fields."""
    assert suggest_best_mapping(sales_records) == {"x": "name", "y": "sales"}
    assert suggest_best_mapping([{"only": 1}]) is None
