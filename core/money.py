from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from babel.numbers import format_currency
from core.crm_config import CrmConfig

CENT_Q = Decimal("0.01")
CENTS = Decimal("100")
BASIS_POINTS_PER_PERCENT = Decimal("100")

Number = Union[Decimal, int, float, str]


def _q_money(x: Decimal) -> Decimal:
    return x.quantize(CENT_Q, rounding=ROUND_HALF_UP)


def _to_decimal(x: Number) -> Decimal:
    if isinstance(x, Decimal):
        return x
    # str() keeps floats like 0.1 from dragging binary noise along
    return Decimal(str(x))


def _resolve_rate(rate: Optional[Number], config: Optional[CrmConfig]) -> Decimal:
    if rate is not None:
        return _to_decimal(rate)
    if config is None:
        raise ValueError("Either a tax rate or a CrmConfig is required")
    return config.default_tax_rate


def calculate_tax(
    net_amount: Number,
    rate: Optional[Number] = None,
    *,
    config: Optional[CrmConfig] = None,
) -> Decimal:
    """
    Tax on a net amount. ``rate`` is a percentage (19 for 19 %); when omitted
    the configured default rate is used. Rounded half-up to 2 places.
    """
    pct = _resolve_rate(rate, config)
    return _q_money(_to_decimal(net_amount) * (pct / Decimal("100")))


def calculate_gross(
    net_amount: Number,
    rate: Optional[Number] = None,
    *,
    config: Optional[CrmConfig] = None,
) -> Decimal:
    tax = calculate_tax(net_amount, rate, config=config)
    return _q_money(_to_decimal(net_amount) + tax)


def format_money(
    amount: Number,
    currency: Optional[str] = None,
    *,
    config: CrmConfig,
) -> str:
    return format_currency(
        _to_decimal(amount),
        currency or config.currency,
        locale=config.locale,
    )


def cents_to_amount(cents: int) -> Decimal:
    """Integer minor units (quotes) -> decimal major units."""
    return _q_money(Decimal(int(cents or 0)) / CENTS)


def percent_to_basis_points(rate: Number) -> int:
    """19.0 -> 1900"""
    bp = _to_decimal(rate) * BASIS_POINTS_PER_PERCENT
    return int(bp.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
