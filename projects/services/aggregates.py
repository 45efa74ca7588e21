from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from django.db.models import DecimalField, Sum, Value
from django.db.models.functions import Coalesce
from projects.models import Project

AMOUNT_Q = Decimal("0.01")
ZERO = Decimal("0")


def _q_amount(x: Decimal) -> Decimal:
    return x.quantize(AMOUNT_Q, rounding=ROUND_HALF_UP)


def total_billable_hours(project) -> Decimal:
    """Sum of hours over the project's billable time entries (0 if none)."""
    total = project.time_entries.filter(billable=True).aggregate(
        s=Coalesce(
            Sum("hours"),
            Value(ZERO),
            output_field=DecimalField(max_digits=12, decimal_places=2),
        )
    )["s"]
    return Decimal(total)


def billable_amount_for(
    *,
    rate_type: str,
    hourly_rate: Decimal | None,
    fixed_price: Decimal | None,
    billable_hours: Decimal,
) -> Decimal:
    """
    hourly   -> hours * hourly_rate
    fixed    -> fixed_price
    retainer -> 0 (also 0 when the matching rate field is unset)
    """
    if rate_type == Project.RATE_HOURLY and hourly_rate:
        return _q_amount(Decimal(billable_hours) * Decimal(hourly_rate))

    if rate_type == Project.RATE_FIXED and fixed_price:
        return _q_amount(Decimal(fixed_price))

    return _q_amount(ZERO)


def total_billable_amount(project) -> Decimal:
    return billable_amount_for(
        rate_type=project.rate_type,
        hourly_rate=project.hourly_rate,
        fixed_price=project.fixed_price,
        billable_hours=total_billable_hours(project),
    )


def is_over_budget(project) -> bool:
    if not project.budget_hours:
        return False
    return total_billable_hours(project) > Decimal(project.budget_hours)


def is_active(project) -> bool:
    return project.is_active()
