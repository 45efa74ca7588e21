# quotes/models.py
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from core.models import SoftDeleteModel
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class Quote(SoftDeleteModel):
    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        SENT = "sent", "Sent"
        ACCEPTED = "accepted", "Accepted"
        REJECTED = "rejected", "Rejected"
        CONVERTED = "converted", "Converted"

    DEFAULT_TAX_RATE = 1900  # basis points, 19.00 %

    client = models.ForeignKey(
        "clients.Client",
        on_delete=models.CASCADE,
        related_name="quotes",
    )
    project = models.ForeignKey(
        "projects.Project",
        on_delete=models.SET_NULL,
        related_name="quotes",
        blank=True,
        null=True,
    )

    quote_number = models.CharField(max_length=64, unique=True)
    version = models.IntegerField(default=1)

    status = models.CharField(
        max_length=16, choices=Status.choices, default=Status.DRAFT
    )

    valid_until = models.DateField(blank=True, null=True)
    sent_at = models.DateTimeField(blank=True, null=True)
    accepted_at = models.DateTimeField(blank=True, null=True)

    notes = models.TextField(blank=True, null=True, help_text="Internal notes")
    client_notes = models.TextField(
        blank=True, null=True, help_text="Shown to the client"
    )

    # Money in cents, tax rate in basis points (1900 = 19.00 %)
    subtotal = models.PositiveBigIntegerField(default=0)
    tax_rate = models.PositiveIntegerField(default=DEFAULT_TAX_RATE)
    tax_amount = models.PositiveBigIntegerField(default=0)
    total = models.PositiveBigIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["client", "status"], name="quote_client_status_idx"
            ),
        ]

    def __str__(self):
        return f"{self.quote_number} v{self.version} ({self.status})"

    # -----------------------------
    # State predicates
    # -----------------------------
    def is_draft(self) -> bool:
        return self.status == self.Status.DRAFT

    def can_be_edited(self) -> bool:
        # Advisory only: nothing here blocks writes to a sent quote
        return self.status in (self.Status.DRAFT,)

    def is_expired(self, today: Optional[date] = None) -> bool:
        if not self.valid_until or self.status == self.Status.ACCEPTED:
            return False
        today = today or timezone.localdate()
        return self.valid_until <= today

    def can_be_converted(self) -> bool:
        # TODO: also require "no invoice yet" once invoices reference quotes
        return self.status == self.Status.ACCEPTED

    # -----------------------------
    # Transitions
    # -----------------------------
    def mark_sent(self, *, at=None) -> None:
        self.status = self.Status.SENT
        self.sent_at = at or timezone.now()
        self.save(update_fields=["status", "sent_at", "updated_at"])

    def mark_accepted(self, *, at=None) -> None:
        now = at or timezone.now()
        self.status = self.Status.ACCEPTED
        self.accepted_at = now
        if not self.sent_at:
            self.sent_at = now
        self.save(update_fields=["status", "sent_at", "accepted_at", "updated_at"])

    def mark_rejected(self) -> None:
        self.status = self.Status.REJECTED
        self.save(update_fields=["status", "updated_at"])

    @property
    def tax_percent(self) -> Decimal:
        return Decimal(self.tax_rate) / Decimal("100")


class QuoteItem(models.Model):
    quote = models.ForeignKey(
        "quotes.Quote",
        on_delete=models.CASCADE,
        related_name="items",
    )

    description = models.TextField()
    quantity = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("1.00"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    unit = models.CharField(max_length=32, default="hours")

    # cents
    unit_price = models.PositiveIntegerField(default=0)
    total = models.PositiveIntegerField(default=0)

    sort_order = models.PositiveSmallIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["sort_order", "id"]

    def __str__(self):
        return f"{self.description[:40]} × {self.quantity}"
