from datetime import date
from decimal import Decimal

import pytest
from clients.models import Client, Contact
from core.crm_config import CrmConfig
from projects.models import Project, TimeEntry
from quotes.models import Quote


@pytest.fixture
def crm_config():
    return CrmConfig()


@pytest.fixture
def user(django_user_model):
    return django_user_model.objects.create_user(username="jane", password="pw")


@pytest.fixture
def acme(db):
    return Client.objects.create(
        name="Jane Doe",
        company="Acme GmbH",
        address_line_1="Main St 1",
        postal_code="10115",
        city="Berlin",
        country="Germany",
        email="jane@acme.test",
    )


@pytest.fixture
def make_contact(acme):
    def _make(name="Contact", client=None, **kwargs):
        return Contact.objects.create(client=client or acme, name=name, **kwargs)

    return _make


@pytest.fixture
def make_project(acme):
    def _make(name="Website", client=None, **kwargs):
        return Project.objects.create(client=client or acme, name=name, **kwargs)

    return _make


@pytest.fixture
def log_time(user):
    def _log(project, hours, *, billable=True, on=date(2025, 1, 6), **kwargs):
        return TimeEntry.objects.create(
            project=project,
            user=user,
            date=on,
            hours=Decimal(str(hours)),
            billable=billable,
            **kwargs,
        )

    return _log


@pytest.fixture
def make_quote(acme):
    counter = {"n": 0}

    def _make(client=None, **kwargs):
        counter["n"] += 1
        kwargs.setdefault("quote_number", f"Q-2025-{counter['n']:04d}")
        return Quote.objects.create(client=client or acme, **kwargs)

    return _make
