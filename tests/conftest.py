import pytest


@pytest.fixture
def sales_csv():
    """Small name/sales/region table as delimited text."""
    return "name,sales,region\nAlice,100,North\nBob,200,South\nCarol,150,North\nDave,175,East\n"


@pytest.fixture
def sales_records():
    return [
        {"name": "Alice", "sales": 100, "region": "North"},
        {"name": "Bob", "sales": 200, "region": "South"},
        {"name": "Carol", "sales": 150, "region": "North"},
        {"name": "Dave", "sales": 175, "region": "East"},
    ]


@pytest.fixture
def wide_records():
    """Five regions with one numeric column per quarter."""
    return [
        {"region": "North", "q1": 10, "q2": 12, "q3": 14, "q4": 16},
        {"region": "South", "q1": 20, "q2": 18, "q3": 25, "q4": 22},
        {"region": "East", "q1": 5, "q2": 7, "q3": 9, "q4": 11},
        {"region": "West", "q1": 30, "q2": 28, "q3": 26, "q4": 24},
        {"region": "Central", "q1": 15, "q2": 15, "q3": 16, "q4": 17},
    ]


@pytest.fixture
def daily_records():
    return [
        {"date": "2024-01-01", "value": 10},
        {"date": "2024-01-02", "value": 20},
        {"date": "2024-01-03", "value": 30},
        {"date": "2024-01-04", "value": 25},
    ]


@pytest.fixture
def nested_records():
    return [
        {"id": 1, "user": {"name": "Alice", "profile": {"age": 30}}, "metrics": {"value": 10}},
        {"id": 2, "user": {"name": "Bob", "profile": {"age": 41}}, "metrics": {"value": 25}},
        {"id": 3, "user": {"name": "Carol", "profile": {"age": 27}}, "metrics": {"value": 17}},
    ]
