# projects/models.py
from decimal import Decimal

from core.models import SoftDeleteModel
from django.conf import settings
from django.db import models


class Project(SoftDeleteModel):
    # -----------------------------
    # Lifecycle status
    # -----------------------------
    STATUS_ACTIVE = "active"
    STATUS_COMPLETED = "completed"
    STATUS_ARCHIVED = "archived"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_ARCHIVED, "Archived"),
    ]

    # -----------------------------
    # Billing model
    # -----------------------------
    RATE_HOURLY = "hourly"
    RATE_FIXED = "fixed"
    RATE_RETAINER = "retainer"

    RATE_TYPE_CHOICES = [
        (RATE_HOURLY, "Hourly"),
        (RATE_FIXED, "Fixed Price"),
        (RATE_RETAINER, "Retainer"),
    ]

    client = models.ForeignKey(
        "clients.Client",
        on_delete=models.CASCADE,
        related_name="projects",
    )

    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, null=True)

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_ACTIVE,
        db_index=True,
    )

    rate_type = models.CharField(
        max_length=16,
        choices=RATE_TYPE_CHOICES,
        default=RATE_HOURLY,
    )

    hourly_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        blank=True,
        null=True,
        help_text="Only used when billing type is hourly",
    )

    fixed_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        blank=True,
        null=True,
        help_text="Only used when billing type is fixed price",
    )

    budget_hours = models.IntegerField(
        blank=True,
        null=True,
        help_text="Optional: budget limit for billable hours",
    )

    start_date = models.DateField(blank=True, null=True)
    end_date = models.DateField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    # Computed on read; see projects.services.aggregates
    @property
    def total_billable_hours(self) -> Decimal:
        from projects.services.aggregates import total_billable_hours

        return total_billable_hours(self)

    @property
    def total_billable_amount(self) -> Decimal:
        from projects.services.aggregates import total_billable_amount

        return total_billable_amount(self)

    def is_active(self) -> bool:
        return self.status == self.STATUS_ACTIVE

    def is_over_budget(self) -> bool:
        from projects.services.aggregates import is_over_budget

        return is_over_budget(self)


class TimeEntry(models.Model):
    project = models.ForeignKey(
        "projects.Project",
        on_delete=models.CASCADE,
        related_name="time_entries",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="time_entries",
    )

    description = models.TextField(blank=True, null=True)
    date = models.DateField(db_index=True)
    hours = models.DecimalField(max_digits=8, decimal_places=2)

    billable = models.BooleanField(default=True)
    invoiced = models.BooleanField(default=False)

    # Not a foreign key yet: there is no invoice entity
    invoice_id = models.PositiveBigIntegerField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "-created_at"]
        verbose_name_plural = "time entries"
        indexes = [
            models.Index(
                fields=["billable", "invoiced"], name="timeentry_billing_idx"
            ),
        ]

    def __str__(self):
        return f"{self.project} {self.date} {self.hours}h"

    @property
    def billable_amount(self) -> Decimal:
        if not self.billable or self.project_id is None:
            return Decimal("0")
        rate = self.project.hourly_rate or Decimal("0")
        return Decimal(self.hours) * rate

    def mark_as_invoiced(self, invoice_id: int) -> None:
        self.invoiced = True
        self.invoice_id = invoice_id
        self.save(update_fields=["invoiced", "invoice_id", "updated_at"])
