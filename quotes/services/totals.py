from __future__ import annotations

import logging
from decimal import ROUND_DOWN, Decimal
from typing import Optional

from core.crm_config import CrmConfig
from django.db import transaction
from django.db.models import Sum
from quotes.models import Quote, QuoteItem

log = logging.getLogger(__name__)

BASIS_POINTS_SCALE = 10000


def item_total(quantity, unit_price: int) -> int:
    """
    floor(quantity * unit_price) in cents. Exact decimal product, truncated;
    both factors are non-negative so truncation and floor agree.
    """
    qty = Decimal(str(quantity))
    if qty < 0 or unit_price < 0:
        raise ValueError("quantity and unit_price must be >= 0")
    product = qty * Decimal(int(unit_price))
    return int(product.to_integral_value(rounding=ROUND_DOWN))


def tax_amount_for(subtotal: int, tax_rate: int) -> int:
    """
    Tax in cents for a subtotal in cents and a rate in basis points:
    floor(subtotal * tax_rate / 10000), integer arithmetic only.
    """
    if subtotal < 0 or tax_rate < 0:
        raise ValueError("subtotal and tax_rate must be >= 0")
    return (int(subtotal) * int(tax_rate)) // BASIS_POINTS_SCALE


def calculate_totals(quote: Quote) -> Quote:
    """
    Recompute subtotal / tax_amount / total from the quote's items and
    persist them.
    """
    with transaction.atomic():
        # Row lock so concurrent item writes serialize on the parent quote;
        # the rate is re-read under the lock
        quote.tax_rate = (
            Quote.all_objects.select_for_update()
            .filter(pk=quote.pk)
            .values_list("tax_rate", flat=True)
            .get()
        )

        subtotal = (
            QuoteItem.objects.filter(quote_id=quote.pk)
            .aggregate(s=Sum("total"))
            .get("s")
            or 0
        )

        quote.subtotal = int(subtotal)
        quote.tax_amount = tax_amount_for(quote.subtotal, quote.tax_rate)
        quote.total = quote.subtotal + quote.tax_amount
        quote.save(update_fields=["subtotal", "tax_amount", "total", "updated_at"])

    log.info(
        "Quote %s totals: subtotal=%s tax=%s total=%s",
        quote.quote_number,
        quote.subtotal,
        quote.tax_amount,
        quote.total,
    )
    return quote


def save_quote_item(item: QuoteItem) -> QuoteItem:
    """
    The write path for quote items: recompute the line total, persist the
    item, then bring the parent quote's totals up to date.
    """
    with transaction.atomic():
        item.total = item_total(item.quantity, item.unit_price)
        item.save()
        calculate_totals(item.quote)
    return item


def delete_quote_item(
    item: QuoteItem,
    *,
    config: Optional[CrmConfig] = None,
    recalculate: Optional[bool] = None,
) -> Quote:
    """
    Delete a line item. With ``recalculate`` unset,
    ``config.quote.recalculate_on_item_delete`` decides whether the parent
    quote's totals are refreshed; when they are not, the stored totals
    keep counting the removed line until the next calculate_totals().
    """
    if recalculate is None:
        if config is None:
            raise ValueError("Either recalculate or a CrmConfig is required")
        recalculate = config.quote.recalculate_on_item_delete

    quote = item.quote
    with transaction.atomic():
        item.delete()
        if recalculate:
            calculate_totals(quote)
        else:
            log.debug("Quote %s totals left stale after item delete", quote.pk)
    return quote
