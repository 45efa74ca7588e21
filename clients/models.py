# clients/models.py
import logging

from core.models import SoftDeleteModel
from django.db import models, transaction
from django.db.models import Case, Value, When

log = logging.getLogger(__name__)


class Client(SoftDeleteModel):
    name = models.CharField(max_length=255, db_index=True)
    company = models.CharField(max_length=255, blank=True, null=True, db_index=True)

    address_line_1 = models.CharField(max_length=255, blank=True, null=True)
    address_line_2 = models.CharField(max_length=255, blank=True, null=True)
    postal_code = models.CharField(max_length=20, blank=True, null=True)
    city = models.CharField(max_length=255, blank=True, null=True)
    country = models.CharField(max_length=255, blank=True, null=True, default="Germany")

    email = models.EmailField(blank=True, null=True, db_index=True)
    phone = models.CharField(max_length=50, blank=True, null=True)
    website = models.CharField(max_length=255, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.company})" if self.company else self.name

    @property
    def full_address(self) -> str:
        """
        Multi-line postal address; empty components are skipped, postal code
        and city share a line.
        """
        city_line = f"{self.postal_code or ''} {self.city or ''}".strip()
        parts = [
            self.address_line_1,
            self.address_line_2,
            city_line,
            self.country,
        ]
        return "\n".join(p for p in parts if p)

    def primary_contact(self):
        return self.contacts.filter(is_primary=True).first()


class Contact(SoftDeleteModel):
    client = models.ForeignKey(
        "clients.Client",
        on_delete=models.CASCADE,
        related_name="contacts",
    )

    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, null=True)
    phone = models.CharField(max_length=255, blank=True, null=True)
    position = models.CharField(max_length=255, blank=True, null=True)
    is_primary = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-is_primary", "name"]
        indexes = [
            models.Index(
                fields=["client", "is_primary"], name="contact_client_primary_idx"
            ),
        ]

    def __str__(self):
        return self.name

    @property
    def full_contact_info(self) -> str:
        parts = [self.name, self.position, self.email, self.phone]
        return " | ".join(p for p in parts if p)

    def make_primary(self) -> None:
        """
        Make this the client's only primary contact.

        One UPDATE over every contact of the client (trashed ones included,
        so a restore cannot bring back a second primary).
        """
        with transaction.atomic():
            Contact.all_objects.filter(client_id=self.client_id).update(
                is_primary=Case(
                    When(pk=self.pk, then=Value(True)),
                    default=Value(False),
                )
            )
        self.is_primary = True
        log.info("Contact %s is now primary for client %s", self.pk, self.client_id)
