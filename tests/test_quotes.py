import json
from datetime import date, datetime
from datetime import timezone as dt_timezone
from decimal import Decimal

import pytest
from core.crm_config import CrmConfig, QuoteSettings, get_crm_config
from django.core.exceptions import ValidationError
from django.core.management import CommandError, call_command
from django.db import IntegrityError, transaction
from quotes.models import Quote, QuoteItem
from quotes.services.numbering import (
    default_valid_until,
    format_document_number,
    next_quote_number,
)
from quotes.services.totals import (
    calculate_totals,
    delete_quote_item,
    item_total,
    save_quote_item,
    tax_amount_for,
)
from quotes.tasks import (
    recalculate_all_quote_totals_task,
    recalculate_quote_totals_task,
)

pytestmark = pytest.mark.django_db


@pytest.fixture
def add_item():
    def _add(quote, quantity, unit_price, description="Work", **kwargs):
        item = QuoteItem(
            quote=quote,
            description=description,
            quantity=Decimal(str(quantity)),
            unit_price=unit_price,
            **kwargs,
        )
        return save_quote_item(item)

    return _add


# -----------------------------
# Arithmetic
# -----------------------------
@pytest.mark.parametrize(
    "quantity,unit_price,expected",
    [
        (Decimal("1.5"), 3333, 4999),
        (Decimal("0.33"), 100, 33),
        (Decimal("2"), 10000, 20000),
        (Decimal("0"), 10000, 0),
        ("1.25", 99, 123),
    ],
)
def test_item_total_floors_to_whole_cents(quantity, unit_price, expected):
    assert item_total(quantity, unit_price) == expected


def test_item_total_rejects_negative_input():
    with pytest.raises(ValueError):
        item_total(Decimal("-1"), 100)


@pytest.mark.parametrize(
    "subtotal,tax_rate,expected",
    [
        (100000, 1900, 19000),
        (100000, 700, 7000),
        (100000, 0, 0),
        (333, 1900, 63),
        (0, 1900, 0),
    ],
)
def test_tax_amount_for(subtotal, tax_rate, expected):
    assert tax_amount_for(subtotal, tax_rate) == expected


# -----------------------------
# Totals
# -----------------------------
def test_quote_defaults(make_quote):
    quote = make_quote()

    assert quote.status == Quote.Status.DRAFT
    assert quote.version == 1
    assert quote.tax_rate == 1900
    assert quote.tax_percent == Decimal("19")
    assert (quote.subtotal, quote.tax_amount, quote.total) == (0, 0, 0)


def test_save_quote_item_sets_line_total_and_quote_totals(make_quote, add_item):
    quote = make_quote()

    item = add_item(quote, "1.5", 3333)

    assert item.total == 4999
    quote.refresh_from_db()
    assert quote.subtotal == 4999
    assert quote.tax_amount == 949
    assert quote.total == 5948


def test_calculate_totals_sums_items(make_quote, add_item):
    quote = make_quote()
    add_item(quote, 2, 10000)
    add_item(quote, "1.5", 3333)

    calculate_totals(quote)

    quote.refresh_from_db()
    assert quote.subtotal == 24999
    assert quote.tax_amount == 4749
    assert quote.total == 29748


def test_calculate_totals_uses_quote_tax_rate(make_quote, add_item):
    quote = make_quote(tax_rate=700)
    add_item(quote, 1, 100000)

    quote.refresh_from_db()
    assert (quote.subtotal, quote.tax_amount, quote.total) == (100000, 7000, 107000)


def test_calculate_totals_without_items_is_zero(make_quote):
    quote = make_quote(subtotal=500, tax_amount=95, total=595)

    calculate_totals(quote)

    quote.refresh_from_db()
    assert (quote.subtotal, quote.tax_amount, quote.total) == (0, 0, 0)


def test_changing_an_item_updates_totals(make_quote, add_item):
    quote = make_quote()
    item = add_item(quote, 1, 10000)

    item.quantity = Decimal("3")
    save_quote_item(item)

    quote.refresh_from_db()
    assert quote.subtotal == 30000
    assert quote.total == 35700


def test_delete_item_recalculates_by_default(make_quote, add_item, crm_config):
    quote = make_quote()
    add_item(quote, 1, 10000)
    extra = add_item(quote, 1, 5000)

    delete_quote_item(extra, config=crm_config)

    quote.refresh_from_db()
    assert quote.subtotal == 10000
    assert quote.total == 11900


def test_delete_item_without_recalculation_leaves_totals(make_quote, add_item):
    quote = make_quote()
    add_item(quote, 1, 10000)
    extra = add_item(quote, 1, 5000)

    delete_quote_item(extra, recalculate=False)

    quote.refresh_from_db()
    assert quote.items.count() == 1
    assert quote.subtotal == 15000

    calculate_totals(quote)
    quote.refresh_from_db()
    assert quote.subtotal == 10000


def test_delete_item_follows_config(make_quote, add_item):
    config = CrmConfig(quote=QuoteSettings(recalculate_on_item_delete=False))
    quote = make_quote()
    add_item(quote, 1, 10000)
    extra = add_item(quote, 1, 5000)

    delete_quote_item(extra, config=config)

    quote.refresh_from_db()
    assert quote.subtotal == 15000


def test_delete_item_reads_setting_through_config(make_quote, add_item, settings):
    settings.CRM_RECALCULATE_ON_ITEM_DELETE = False
    quote = make_quote()
    add_item(quote, 1, 10000)
    extra = add_item(quote, 1, 5000)

    delete_quote_item(extra, config=get_crm_config())

    quote.refresh_from_db()
    assert quote.subtotal == 15000


def test_delete_item_needs_config_or_explicit_choice(make_quote, add_item):
    item = add_item(make_quote(), 1, 100)

    with pytest.raises(ValueError):
        delete_quote_item(item)

    assert QuoteItem.objects.filter(pk=item.pk).exists()


def test_calculate_totals_uses_stored_tax_rate(make_quote, add_item):
    quote = make_quote()
    add_item(quote, 1, 100000)
    Quote.objects.filter(pk=quote.pk).update(tax_rate=700)

    calculate_totals(quote)

    assert quote.tax_rate == 700
    quote.refresh_from_db()
    assert (quote.tax_amount, quote.total) == (7000, 107000)


def test_large_totals_fit(make_quote, add_item):
    quote = make_quote()
    add_item(quote, 1000, 2_000_000)
    add_item(quote, 1000, 2_000_000)

    quote.refresh_from_db()
    assert quote.subtotal == 4_000_000_000
    assert quote.tax_amount == 760_000_000
    assert quote.total == 4_760_000_000


def test_negative_quantity_fails_validation(make_quote):
    item = QuoteItem(
        quote=make_quote(), description="Refund", quantity=Decimal("-2")
    )

    with pytest.raises(ValidationError):
        item.full_clean()


def test_items_are_ordered_by_sort_order(make_quote, add_item):
    quote = make_quote()
    add_item(quote, 1, 100, description="Second", sort_order=2)
    add_item(quote, 1, 100, description="First", sort_order=1)

    assert [i.description for i in quote.items.all()] == ["First", "Second"]


def test_items_follow_quote_hard_delete(make_quote, add_item):
    quote = make_quote()
    add_item(quote, 1, 100)

    quote.hard_delete()

    assert QuoteItem.objects.count() == 0


# -----------------------------
# Identity
# -----------------------------
def test_quote_number_is_unique(make_quote):
    make_quote(quote_number="Q-2025-0001")

    with pytest.raises(IntegrityError), transaction.atomic():
        make_quote(quote_number="Q-2025-0001")


def test_format_document_number():
    assert format_document_number("Q", 2025, 7) == "Q-2025-0007"
    assert format_document_number("INV", 2025, 12345, padding=3) == "INV-2025-12345"


def test_next_quote_number(make_quote, crm_config):
    assert next_quote_number(config=crm_config, year=2025) == "Q-2025-0001"

    make_quote(quote_number="Q-2025-0001")
    make_quote(quote_number="Q-2025-0002").delete()
    make_quote(quote_number="Q-2024-0009")
    make_quote(quote_number="Q-2025-draft")

    assert next_quote_number(config=crm_config, year=2025) == "Q-2025-0003"
    assert next_quote_number(config=crm_config, year=2024) == "Q-2024-0010"


def test_default_valid_until(crm_config):
    assert default_valid_until(config=crm_config, today=date(2025, 1, 1)) == date(
        2025, 1, 31
    )


# -----------------------------
# Lifecycle
# -----------------------------
def test_is_expired(make_quote):
    quote = make_quote(valid_until=date(2025, 1, 10))

    assert not quote.is_expired(today=date(2025, 1, 9))
    assert quote.is_expired(today=date(2025, 1, 10))
    assert quote.is_expired(today=date(2025, 1, 11))


def test_accepted_quote_never_expires(make_quote):
    quote = make_quote(valid_until=date(2025, 1, 10), status=Quote.Status.ACCEPTED)

    assert not quote.is_expired(today=date(2026, 1, 1))


def test_quote_without_valid_until_never_expires(make_quote):
    assert not make_quote().is_expired(today=date(2099, 1, 1))


def test_state_predicates(make_quote):
    draft = make_quote()
    accepted = make_quote(status=Quote.Status.ACCEPTED)

    assert draft.is_draft() and draft.can_be_edited()
    assert not draft.can_be_converted()
    assert not accepted.is_draft() and not accepted.can_be_edited()
    assert accepted.can_be_converted()


def test_mark_sent_then_accepted(make_quote):
    quote = make_quote()
    sent = datetime(2025, 1, 6, 9, 0, tzinfo=dt_timezone.utc)

    quote.mark_sent(at=sent)
    quote.refresh_from_db()
    assert quote.status == Quote.Status.SENT
    assert quote.sent_at == sent

    quote.mark_accepted()
    quote.refresh_from_db()
    assert quote.status == Quote.Status.ACCEPTED
    assert quote.sent_at == sent
    assert quote.accepted_at is not None


def test_mark_accepted_fills_missing_sent_at(make_quote):
    quote = make_quote()

    quote.mark_accepted()

    assert quote.sent_at == quote.accepted_at


def test_mark_rejected(make_quote):
    quote = make_quote(status=Quote.Status.SENT)

    quote.mark_rejected()

    quote.refresh_from_db()
    assert quote.status == Quote.Status.REJECTED


# -----------------------------
# Tasks and command
# -----------------------------
def test_recalculate_quote_totals_task(make_quote):
    quote = make_quote()
    QuoteItem.objects.create(quote=quote, description="Raw", total=10000)

    res = recalculate_quote_totals_task.run(quote_id=quote.id)

    assert res["subtotal"] == 10000
    assert res["tax_amount"] == 1900
    assert res["total"] == 11900


def test_recalculate_all_quote_totals_task_skips_trashed(make_quote):
    live = make_quote()
    trashed = make_quote()
    trashed.delete()
    for quote in (live, trashed):
        QuoteItem.objects.create(quote=quote, description="Raw", total=100)

    res = recalculate_all_quote_totals_task.run()

    assert res == {"updated": 1}
    trashed.refresh_from_db()
    assert trashed.subtotal == 0


def test_recalculate_quote_totals_command(make_quote, capsys):
    quote = make_quote()
    QuoteItem.objects.create(quote=quote, description="Raw", total=5000)

    call_command("recalculate_quote_totals", f"--quote-id={quote.id}")

    out = capsys.readouterr().out
    payload = json.loads(out[: out.rindex("}") + 1])
    assert payload["quote_number"] == quote.quote_number
    assert payload["total"] == 5950


def test_recalculate_quote_totals_command_all(make_quote, capsys):
    make_quote()
    make_quote()

    call_command("recalculate_quote_totals", "--all")

    assert '"updated": 2' in capsys.readouterr().out


def test_recalculate_quote_totals_command_unknown_quote():
    with pytest.raises(CommandError):
        call_command("recalculate_quote_totals", "--quote-id=999")
