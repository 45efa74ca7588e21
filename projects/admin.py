# projects/admin.py
from __future__ import annotations

from decimal import Decimal

from core.admin import SoftDeleteAdmin
from core.crm_config import get_crm_config
from core.money import format_money
from django.contrib import admin, messages
from django.db.models import DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce
from projects.models import Project, TimeEntry
from projects.services.overview import billable_hours_overview


class TimeEntryInline(admin.TabularInline):
    model = TimeEntry
    extra = 0
    fields = ("date", "user", "hours", "billable", "invoiced", "description")
    ordering = ("-date",)


@admin.register(Project)
class ProjectAdmin(SoftDeleteAdmin):
    list_display = (
        "name",
        "client",
        "status",
        "rate_type",
        "rate",
        "budget_hours",
        "billable_hours",
        "over_budget",
        "trashed",
        "created_at",
    )
    list_filter = ("status", "rate_type", "client")
    search_fields = ("name", "client__name", "client__company")
    readonly_fields = ("created_at", "updated_at", "deleted_at")
    inlines = [TimeEntryInline]
    change_list_template = "admin/projects/project/change_list.html"

    fieldsets = (
        ("Project", {"fields": ("client", "name", "description")}),
        ("Status & Dates", {"fields": ("status", "start_date", "end_date")}),
        (
            "Billing",
            {"fields": ("rate_type", "hourly_rate", "fixed_price", "budget_hours")},
        ),
        ("Meta", {"fields": ("created_at", "updated_at", "deleted_at")}),
    )

    def get_queryset(self, request):
        """
        Annotate each project with its billable hours:
          sum(hours) over time entries where billable = true
        """
        qs = super().get_queryset(request)
        return qs.annotate(
            billable_hours_sum=Coalesce(
                Sum("time_entries__hours", filter=Q(time_entries__billable=True)),
                Value(Decimal("0")),
                output_field=DecimalField(max_digits=12, decimal_places=2),
            )
        )

    def save_model(self, request, obj: Project, form, change: bool) -> None:
        # Only the rate field matching the billing type is kept
        if obj.rate_type != Project.RATE_HOURLY:
            obj.hourly_rate = None
        if obj.rate_type != Project.RATE_FIXED:
            obj.fixed_price = None
        super().save_model(request, obj, form, change)

    @admin.display(description="Rate")
    def rate(self, obj: Project) -> str:
        config = get_crm_config()
        if obj.rate_type == Project.RATE_HOURLY and obj.hourly_rate is not None:
            return f"{format_money(obj.hourly_rate, config=config)}/hr"
        if obj.rate_type == Project.RATE_FIXED and obj.fixed_price is not None:
            return format_money(obj.fixed_price, config=config)
        return "-"

    @admin.display(ordering="billable_hours_sum", description="Billable hrs")
    def billable_hours(self, obj: Project) -> str:
        hours = getattr(obj, "billable_hours_sum", None)
        if hours is None:
            hours = obj.total_billable_hours
        return f"{hours:.2f}"

    @admin.display(boolean=True, description="Over budget?")
    def over_budget(self, obj: Project) -> bool:
        if not obj.budget_hours:
            return False
        hours = getattr(obj, "billable_hours_sum", None)
        if hours is None:
            return obj.is_over_budget()
        return hours > obj.budget_hours

    def changelist_view(self, request, extra_context=None):
        """
        Adds the billable-hours overview (one card per project with time
        entries) to the changelist page context.
        """
        extra_context = extra_context or {}
        extra_context["hours_overview"] = billable_hours_overview(
            config=get_crm_config()
        )
        return super().changelist_view(request, extra_context=extra_context)


@admin.register(TimeEntry)
class TimeEntryAdmin(admin.ModelAdmin):
    list_display = (
        "date",
        "project",
        "user",
        "hours",
        "billable",
        "invoiced",
        "amount",
    )
    list_filter = ("billable", "invoiced", "project")
    search_fields = ("description", "project__name", "user__username")
    date_hierarchy = "date"
    ordering = ("-date", "-created_at")
    readonly_fields = ("invoice_id", "created_at", "updated_at")
    list_select_related = ("project", "user")

    actions = ("mark_billable", "mark_non_billable")

    @admin.display(description="Amount")
    def amount(self, obj: TimeEntry) -> str:
        return format_money(obj.billable_amount, config=get_crm_config())

    @admin.action(description="Mark selected entries as billable")
    def mark_billable(self, request, queryset):
        updated = queryset.filter(invoiced=False).update(billable=True)
        self.message_user(
            request, f"Marked {updated} entry(ies) billable.", level=messages.SUCCESS
        )

    @admin.action(description="Mark selected entries as non-billable")
    def mark_non_billable(self, request, queryset):
        updated = queryset.filter(invoiced=False).update(billable=False)
        self.message_user(
            request,
            f"Marked {updated} entry(ies) non-billable.",
            level=messages.SUCCESS,
        )
