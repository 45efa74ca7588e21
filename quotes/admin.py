# quotes/admin.py
from __future__ import annotations

from core.admin import SoftDeleteAdmin
from core.crm_config import get_crm_config
from core.money import cents_to_amount, format_money, percent_to_basis_points
from django.contrib import admin, messages
from django.db import transaction
from django.http import HttpRequest
from quotes.models import Quote, QuoteItem
from quotes.services.numbering import default_valid_until, next_quote_number
from quotes.services.totals import (
    calculate_totals,
    delete_quote_item,
    save_quote_item,
)


class QuoteItemInline(admin.TabularInline):
    model = QuoteItem
    extra = 0
    fields = (
        "sort_order",
        "description",
        "quantity",
        "unit",
        "unit_price",
        "total",
    )
    readonly_fields = ("total",)
    ordering = ("sort_order", "id")


def _money(cents: int) -> str:
    return format_money(cents_to_amount(cents), config=get_crm_config())


@admin.register(Quote)
class QuoteAdmin(SoftDeleteAdmin):
    """
    Quote admin:
    - line item totals and quote totals are computed, never typed in
    - quote number, validity and tax rate are pre-filled for new quotes
    """

    list_display = (
        "quote_number",
        "version",
        "client",
        "project",
        "status",
        "valid_until",
        "expired",
        "subtotal_display",
        "total_display",
        "trashed",
    )
    list_filter = ("status", "client")
    search_fields = (
        "quote_number",
        "client__name",
        "client__company",
        "project__name",
    )
    date_hierarchy = "valid_until"
    ordering = ("-created_at",)
    list_select_related = ("client", "project")

    readonly_fields = (
        "subtotal_display",
        "tax_amount_display",
        "total_display",
        "created_at",
        "updated_at",
        "deleted_at",
    )
    inlines = [QuoteItemInline]

    fieldsets = (
        ("Identity", {"fields": ("quote_number", "version", "client", "project")}),
        (
            "Status",
            {"fields": ("status", "valid_until", "sent_at", "accepted_at")},
        ),
        ("Notes", {"fields": ("notes", "client_notes")}),
        (
            "Totals",
            {
                "fields": (
                    "tax_rate",
                    "subtotal_display",
                    "tax_amount_display",
                    "total_display",
                )
            },
        ),
        ("Meta", {"fields": ("created_at", "updated_at", "deleted_at")}),
    )

    actions = (
        "restore_selected",
        "hard_delete_selected",
        "mark_sent",
        "mark_accepted",
        "mark_rejected",
        "recalculate_totals",
    )

    def get_changeform_initial_data(self, request: HttpRequest) -> dict:
        initial = super().get_changeform_initial_data(request)
        config = get_crm_config()
        initial.setdefault("quote_number", next_quote_number(config=config))
        initial.setdefault("valid_until", default_valid_until(config=config))
        initial.setdefault(
            "tax_rate", percent_to_basis_points(config.default_tax_rate)
        )
        return initial

    def save_formset(self, request, form, formset, change):
        if formset.model is not QuoteItem:
            return super().save_formset(request, form, formset, change)

        with transaction.atomic():
            items = formset.save(commit=False)
            for item in items:
                save_quote_item(item)
            for item in formset.deleted_objects:
                delete_quote_item(item, recalculate=False)
            formset.save_m2m()
            calculate_totals(form.instance)

    def save_model(self, request, obj: Quote, form, change: bool) -> None:
        super().save_model(request, obj, form, change)
        if change and "tax_rate" in form.changed_data:
            calculate_totals(obj)

    # -----------------------------
    # Display helpers
    # -----------------------------
    @admin.display(ordering="subtotal", description="Subtotal")
    def subtotal_display(self, obj: Quote) -> str:
        return _money(obj.subtotal)

    @admin.display(description="Tax")
    def tax_amount_display(self, obj: Quote) -> str:
        return f"{_money(obj.tax_amount)} ({obj.tax_percent:.2f} %)"

    @admin.display(ordering="total", description="Total")
    def total_display(self, obj: Quote) -> str:
        return _money(obj.total)

    @admin.display(boolean=True, description="Expired?")
    def expired(self, obj: Quote) -> bool:
        return obj.is_expired()

    # -----------------------------
    # Transitions
    # -----------------------------
    @admin.action(description="Mark selected quotes as SENT")
    def mark_sent(self, request, queryset):
        updated = 0
        for quote in queryset.filter(status=Quote.Status.DRAFT):
            quote.mark_sent()
            updated += 1
        self.message_user(
            request, f"Marked {updated} quote(s) as sent.", level=messages.SUCCESS
        )

    @admin.action(description="Mark selected quotes as ACCEPTED")
    def mark_accepted(self, request, queryset):
        updated = 0
        for quote in queryset.filter(status=Quote.Status.SENT):
            quote.mark_accepted()
            updated += 1
        self.message_user(
            request, f"Marked {updated} quote(s) as accepted.", level=messages.SUCCESS
        )

    @admin.action(description="Mark selected quotes as REJECTED")
    def mark_rejected(self, request, queryset):
        updated = 0
        for quote in queryset.filter(status=Quote.Status.SENT):
            quote.mark_rejected()
            updated += 1
        self.message_user(
            request, f"Marked {updated} quote(s) as rejected.", level=messages.SUCCESS
        )

    @admin.action(description="Recalculate totals from line items")
    def recalculate_totals(self, request, queryset):
        count = 0
        for quote in queryset:
            calculate_totals(quote)
            count += 1
        self.message_user(
            request, f"Recalculated {count} quote(s).", level=messages.SUCCESS
        )
