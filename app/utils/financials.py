from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from app.models.group import Group
from app.utils.months import month_of, payment_deadline

CENTS = Decimal("0.01")


def calculate_deadline(group: Group, payment_date: date) -> date | None:
    """
    Deadline for a payment made on `payment_date`.

    The deadline lies in the month of the payment date itself. Groups without
    a deadline day have no deadline.
    """
    if not group.payment_deadline_day:
        return None
    return payment_deadline(month_of(payment_date), group.payment_deadline_day)


def calculate_late_fine(group: Group, payment_date: date, amount: Decimal) -> tuple[bool, Decimal, date | None]:
    """
    Returns (is_late, fine_amount, deadline).

    A fixed fine greater than zero wins over the percentage.
    """
    deadline = calculate_deadline(group, payment_date)
    if deadline is None or payment_date <= deadline:
        return False, Decimal("0.00"), deadline

    if group.late_fine_fixed_amount and group.late_fine_fixed_amount > 0:
        fine = Decimal(group.late_fine_fixed_amount)
    elif group.late_fine_percentage:
        fine = Decimal(amount) * Decimal(group.late_fine_percentage) / Decimal(100)
    else:
        fine = Decimal("0")

    return True, fine.quantize(CENTS, rounding=ROUND_HALF_UP), deadline


def as_money(value) -> Decimal:
    """
    Normalise a database aggregate (int, float, Decimal or None) to 2 places.
    """
    return Decimal(str(value or 0)).quantize(CENTS, rounding=ROUND_HALF_UP)
