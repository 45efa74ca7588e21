from decimal import Decimal

import pytest
from clients.models import Client
from django.utils import timezone
from projects.models import Project
from quotes.models import QuoteItem

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize(
    "url",
    [
        "/admin/clients/client/",
        "/admin/clients/contact/",
        "/admin/projects/project/",
        "/admin/projects/timeentry/",
        "/admin/quotes/quote/",
    ],
)
def test_changelists_render(admin_client, url):
    assert admin_client.get(url).status_code == 200


def test_project_changelist_shows_hours_overview(
    admin_client, make_project, log_time
):
    project = make_project("Website", hourly_rate=Decimal("100"))
    log_time(project, 8)

    resp = admin_client.get("/admin/projects/project/")

    assert resp.status_code == 200
    assert "8.00 hrs" in resp.content.decode()


def test_client_changelist_hides_trashed_by_default(admin_client, acme):
    Client.objects.create(name="Gone Ltd").delete()

    live = admin_client.get("/admin/clients/client/").content.decode()
    trashed = admin_client.get("/admin/clients/client/?trashed=only").content.decode()

    assert "Jane Doe" in live and "Gone Ltd" not in live
    assert "Gone Ltd" in trashed


def test_quote_add_form_prefills_number(admin_client):
    resp = admin_client.get("/admin/quotes/quote/add/")

    assert resp.status_code == 200
    assert f"Q-{timezone.localdate().year}-0001" in resp.content.decode()


def test_restore_action(admin_client, acme):
    acme.delete()

    admin_client.post(
        "/admin/clients/client/?trashed=only",
        {"action": "restore_selected", "_selected_action": [acme.pk]},
    )

    acme.refresh_from_db()
    assert not acme.is_trashed


def test_recalculate_totals_action(admin_client, make_quote):
    quote = make_quote()
    QuoteItem.objects.create(quote=quote, description="Raw", total=10000)

    admin_client.post(
        "/admin/quotes/quote/",
        {"action": "recalculate_totals", "_selected_action": [quote.pk]},
    )

    quote.refresh_from_db()
    assert quote.total == 11900


# -----------------------------
# Write paths
# -----------------------------
def _management(prefix, total, initial=0):
    return {
        f"{prefix}-TOTAL_FORMS": str(total),
        f"{prefix}-INITIAL_FORMS": str(initial),
        f"{prefix}-MIN_NUM_FORMS": "0",
        f"{prefix}-MAX_NUM_FORMS": "1000",
    }


def _quote_form(quote, **overrides):
    data = {
        "quote_number": quote.quote_number,
        "version": str(quote.version),
        "client": str(quote.client_id),
        "project": "",
        "status": quote.status,
        "valid_until": "",
        "sent_at_0": "",
        "sent_at_1": "",
        "accepted_at_0": "",
        "accepted_at_1": "",
        "notes": "",
        "client_notes": "",
        "tax_rate": str(quote.tax_rate),
    }
    data.update(overrides)
    return data


def _item_form(index, quote, *, item=None, delete=False, **fields):
    prefix = f"items-{index}"
    data = {
        f"{prefix}-id": str(item.pk) if item else "",
        f"{prefix}-quote": str(quote.pk),
        f"{prefix}-sort_order": "0",
        f"{prefix}-description": "Work",
        f"{prefix}-quantity": "1",
        f"{prefix}-unit": "hours",
        f"{prefix}-unit_price": "0",
    }
    for name, value in fields.items():
        data[f"{prefix}-{name}"] = str(value)
    if delete:
        data[f"{prefix}-DELETE"] = "on"
    return data


def _client_form(client):
    return {
        "name": client.name,
        "company": client.company or "",
        "address_line_1": client.address_line_1 or "",
        "address_line_2": "",
        "postal_code": client.postal_code or "",
        "city": client.city or "",
        "country": client.country or "",
        "email": client.email or "",
        "phone": "",
        "website": "",
        "notes": "",
    }


def _contact_form(index, client, *, contact=None, name="Contact", primary=False):
    prefix = f"contacts-{index}"
    data = {
        f"{prefix}-id": str(contact.pk) if contact else "",
        f"{prefix}-client": str(client.pk),
        f"{prefix}-name": contact.name if contact else name,
        f"{prefix}-position": "",
        f"{prefix}-email": "",
        f"{prefix}-phone": "",
    }
    if primary:
        data[f"{prefix}-is_primary"] = "on"
    return data


def test_quote_inline_adds_changes_and_deletes_items(admin_client, make_quote):
    quote = make_quote()
    kept = QuoteItem.objects.create(
        quote=quote, description="Design", unit_price=10000, total=10000
    )
    dropped = QuoteItem.objects.create(
        quote=quote, description="Hosting", unit_price=5000, total=5000
    )

    data = _quote_form(quote)
    data.update(_management("items", total=3, initial=2))
    data.update(
        _item_form(
            0, quote, item=kept, description="Design", quantity=2, unit_price=10000
        )
    )
    data.update(
        _item_form(
            1,
            quote,
            item=dropped,
            description="Hosting",
            unit_price=5000,
            delete=True,
        )
    )
    data.update(
        _item_form(2, quote, description="Review", quantity="0.5", unit_price=2000)
    )

    resp = admin_client.post(f"/admin/quotes/quote/{quote.pk}/change/", data)

    assert resp.status_code == 302
    assert not QuoteItem.objects.filter(pk=dropped.pk).exists()
    kept.refresh_from_db()
    assert kept.total == 20000
    assert QuoteItem.objects.get(description="Review").total == 1000
    quote.refresh_from_db()
    assert (quote.subtotal, quote.tax_amount, quote.total) == (21000, 3990, 24990)


def test_quote_inline_rejects_negative_quantity(admin_client, make_quote):
    quote = make_quote()

    data = _quote_form(quote)
    data.update(_management("items", total=1))
    data.update(_item_form(0, quote, quantity=-2, unit_price=1000))

    resp = admin_client.post(f"/admin/quotes/quote/{quote.pk}/change/", data)

    assert resp.status_code == 200
    assert quote.items.count() == 0
    quote.refresh_from_db()
    assert quote.total == 0


def test_changing_quote_tax_rate_recalculates(admin_client, make_quote):
    quote = make_quote()
    QuoteItem.objects.create(
        quote=quote, description="Design", unit_price=100000, total=100000
    )

    data = _quote_form(quote, tax_rate=700)
    data.update(_management("items", total=0))

    resp = admin_client.post(f"/admin/quotes/quote/{quote.pk}/change/", data)

    assert resp.status_code == 302
    quote.refresh_from_db()
    assert (quote.tax_rate, quote.tax_amount, quote.total) == (700, 7000, 107000)


def test_client_inline_last_ticked_contact_wins(admin_client, acme, make_contact):
    current = make_contact("Current", is_primary=True)

    data = _client_form(acme)
    data.update(_management("contacts", total=2, initial=1))
    data.update(_contact_form(0, acme, contact=current, primary=True))
    data.update(_contact_form(1, acme, name="Newcomer", primary=True))

    resp = admin_client.post(f"/admin/clients/client/{acme.pk}/change/", data)

    assert resp.status_code == 302
    current.refresh_from_db()
    assert not current.is_primary
    assert acme.primary_contact().name == "Newcomer"
    assert acme.contacts.filter(is_primary=True).count() == 1


def test_contact_admin_primary_clears_siblings(admin_client, acme, make_contact):
    current = make_contact("Current", is_primary=True)

    resp = admin_client.post(
        "/admin/clients/contact/add/",
        {
            "client": str(acme.pk),
            "name": "Newcomer",
            "email": "",
            "phone": "",
            "position": "",
            "is_primary": "on",
        },
    )

    assert resp.status_code == 302
    current.refresh_from_db()
    assert not current.is_primary
    assert acme.primary_contact().name == "Newcomer"


def test_project_admin_keeps_only_matching_rate(admin_client, acme):
    data = {
        "client": str(acme.pk),
        "name": "Relaunch",
        "description": "",
        "status": Project.STATUS_ACTIVE,
        "start_date": "",
        "end_date": "",
        "rate_type": Project.RATE_FIXED,
        "hourly_rate": "100",
        "fixed_price": "5000",
        "budget_hours": "",
    }
    data.update(_management("time_entries", total=0))

    resp = admin_client.post("/admin/projects/project/add/", data)

    assert resp.status_code == 302
    project = Project.objects.get(name="Relaunch")
    assert project.hourly_rate is None
    assert project.fixed_price == Decimal("5000.00")
