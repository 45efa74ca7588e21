from __future__ import annotations

from celery import shared_task
from quotes.models import Quote
from quotes.services.totals import calculate_totals


@shared_task(bind=True, autoretry_for=(Exception,), retry_backoff=True, max_retries=3)
def recalculate_quote_totals_task(self, *, quote_id: int) -> dict:
    quote = Quote.all_objects.get(id=quote_id)
    calculate_totals(quote)
    return {
        "quote_id": quote.id,
        "quote_number": quote.quote_number,
        "subtotal": quote.subtotal,
        "tax_amount": quote.tax_amount,
        "total": quote.total,
    }


@shared_task
def recalculate_all_quote_totals_task() -> dict:
    """
    Refresh every live quote, e.g. after items were removed without a
    recalculation.
    """
    updated = 0
    for quote in Quote.objects.all().iterator():
        calculate_totals(quote)
        updated += 1
    return {"updated": updated}
