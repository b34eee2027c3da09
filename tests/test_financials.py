from datetime import date
from decimal import Decimal
from app.models.group import Group
from app.utils.financials import as_money, calculate_late_fine

def make_group(**overrides) -> Group:
    data = {
        "name": "Fines",
        "monthly_amount": Decimal("1000.00"),
        "max_members": 12,
        "duration": 12,
        "start_date": "2024-01",
        "end_date": "2024-12",
        "payment_deadline_day": 25,
        "late_fine_percentage": Decimal("5.00"),
        "late_fine_fixed_amount": None,
    }
    data.update(overrides)
    return Group(**data)

def test_on_time_payment_has_no_fine():
    is_late, fine, deadline = calculate_late_fine(make_group(), date(2024, 3, 25), Decimal("1000.00"))
    assert not is_late
    assert fine == Decimal("0.00")
    assert deadline == date(2024, 3, 25)

def test_percentage_fine():
    is_late, fine, _ = calculate_late_fine(make_group(), date(2024, 3, 26), Decimal("1000.00"))
    assert is_late
    assert fine == Decimal("50.00")

def test_fixed_fine_wins_over_percentage():
    group = make_group(late_fine_fixed_amount=Decimal("75.00"))
    _, fine, _ = calculate_late_fine(group, date(2024, 3, 28), Decimal("1000.00"))
    assert fine == Decimal("75.00")

def test_zero_fixed_fine_falls_back_to_percentage():
    group = make_group(late_fine_fixed_amount=Decimal("0"), late_fine_percentage=Decimal("2.5"))
    _, fine, _ = calculate_late_fine(group, date(2024, 3, 28), Decimal("1000.00"))
    assert fine == Decimal("25.00")

def test_deadline_clamped_in_short_month():
    group = make_group(payment_deadline_day=31)
    is_late, _, deadline = calculate_late_fine(group, date(2024, 2, 29), Decimal("1000.00"))
    assert deadline == date(2024, 2, 29)
    assert not is_late

def test_no_deadline_day_never_fines():
    is_late, fine, deadline = calculate_late_fine(make_group(payment_deadline_day=None), date(2024, 3, 31), Decimal("1000.00"))
    assert (is_late, fine, deadline) == (False, Decimal("0.00"), None)

def test_late_without_fine_settings():
    group = make_group(late_fine_percentage=None)
    is_late, fine, _ = calculate_late_fine(group, date(2024, 3, 30), Decimal("1000.00"))
    assert is_late
    assert fine == Decimal("0.00")

def test_as_money():
    assert as_money(None) == Decimal("0.00")
    assert as_money(1234.5) == Decimal("1234.50")
    assert as_money(Decimal("10.005")) == Decimal("10.01")
