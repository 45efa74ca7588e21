from __future__ import annotations

import re
from datetime import date, timedelta
from typing import Optional

from core.crm_config import CrmConfig
from django.utils import timezone
from quotes.models import Quote


def format_document_number(
    prefix: str, year: int, sequence: int, padding: int = 4
) -> str:
    """
    Human-readable document number, e.g. Q-2025-0001.
    """
    return f"{prefix}-{year}-{sequence:0{padding}d}"


def _sequence_of(number: str, prefix: str, year: int) -> Optional[int]:
    m = re.fullmatch(rf"{re.escape(prefix)}-{year}-(\d+)", number or "")
    return int(m.group(1)) if m else None


def next_quote_number(*, config: CrmConfig, year: Optional[int] = None) -> str:
    """
    Next free quote number for the year. Trashed quotes keep their numbers
    (quote_number is unique across all rows), so they are counted too.
    """
    year = year or timezone.localdate().year
    prefix = config.quote.number_prefix

    existing = Quote.all_objects.filter(
        quote_number__startswith=f"{prefix}-{year}-"
    ).values_list("quote_number", flat=True)

    seqs = [_sequence_of(n, prefix, year) for n in existing]
    seq = max([s for s in seqs if s is not None], default=0) + 1

    return format_document_number(prefix, year, seq, config.quote.number_padding)


def default_valid_until(*, config: CrmConfig, today: Optional[date] = None) -> date:
    today = today or timezone.localdate()
    return today + timedelta(days=config.quote.default_validity_days)
