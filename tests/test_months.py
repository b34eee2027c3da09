from datetime import date
import pytest
from app.core.errors import ValidationError
from app.utils.months import (
    add_months, display_month, expand_months, month_in_range, month_of,
    months_between, parse_month, payment_deadline,
)

def test_parse_month():
    assert parse_month("2024-03") == (2024, 3)

@pytest.mark.parametrize("value", ["2024-13", "2024-00", "2024-3", "24-03", "2024/03", "", None])
def test_parse_month_rejects_malformed(value):
    with pytest.raises(ValidationError):
        parse_month(value)

def test_months_between():
    assert months_between("2024-01", "2024-06") == 5
    assert months_between("2023-11", "2024-02") == 3
    assert months_between("2024-05", "2024-05") == 0

def test_expand_months_inclusive_and_ordered():
    months = expand_months("2023-11", "2024-02")
    assert months == ["2023-11", "2023-12", "2024-01", "2024-02"]
    assert len(months) == months_between("2023-11", "2024-02") + 1
    assert months == sorted(months)

def test_expand_months_single_month():
    assert expand_months("2024-05", "2024-05") == ["2024-05"]

def test_expand_months_start_after_end():
    with pytest.raises(ValidationError):
        expand_months("2024-06", "2024-01")

def test_expand_months_returns_fresh_list():
    first = expand_months("2024-01", "2024-03")
    first.append("2099-01")
    assert expand_months("2024-01", "2024-03") == ["2024-01", "2024-02", "2024-03"]

def test_add_months_crosses_years():
    assert add_months("2024-11", 3) == "2025-02"
    assert add_months("2024-01", -1) == "2023-12"

def test_month_in_range():
    assert month_in_range("2024-03", "2024-01", "2024-06")
    assert month_in_range("2024-01", "2024-01", "2024-06")
    assert not month_in_range("2024-07", "2024-01", "2024-06")

def test_month_of_and_display():
    assert month_of(date(2024, 2, 29)) == "2024-02"
    assert display_month("2024-02") == "02-2024"

def test_payment_deadline_clamps_to_month_end():
    assert payment_deadline("2024-02", 31) == date(2024, 2, 29)
    assert payment_deadline("2023-02", 30) == date(2023, 2, 28)
    assert payment_deadline("2024-04", 15) == date(2024, 4, 15)
