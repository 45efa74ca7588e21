# clients/admin.py
from __future__ import annotations

from clients.models import Client, Contact
from core.admin import SoftDeleteAdmin
from django.contrib import admin, messages
from django.db.models import Count, Q


class ContactInline(admin.TabularInline):
    model = Contact
    extra = 0
    fields = ("name", "position", "email", "phone", "is_primary")
    ordering = ("-is_primary", "name")


@admin.register(Client)
class ClientAdmin(SoftDeleteAdmin):
    list_display = (
        "name",
        "company",
        "email",
        "phone",
        "city",
        "contact_count",
        "trashed",
        "created_at",
    )
    list_filter = ("city", "country")
    search_fields = ("name", "company", "email")
    readonly_fields = ("full_address", "created_at", "updated_at", "deleted_at")
    inlines = [ContactInline]

    fieldsets = (
        ("Identity", {"fields": ("name", "company")}),
        (
            "Address",
            {
                "fields": (
                    "address_line_1",
                    "address_line_2",
                    ("postal_code", "city"),
                    "country",
                    "full_address",
                )
            },
        ),
        ("Contact", {"fields": ("email", "phone", "website")}),
        ("Notes", {"fields": ("notes",)}),
        ("Meta", {"fields": ("created_at", "updated_at", "deleted_at")}),
    )

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.annotate(
            live_contacts=Count("contacts", filter=Q(contacts__deleted_at__isnull=True))
        )

    @admin.display(ordering="live_contacts", description="Contacts")
    def contact_count(self, obj: Client) -> int:
        return getattr(obj, "live_contacts", 0)

    def save_formset(self, request, form, formset, change):
        super().save_formset(request, form, formset, change)
        if formset.model is not Contact:
            return

        # At most one primary: the last one ticked in this save wins
        touched = list(formset.new_objects) + [c for c, _ in formset.changed_objects]
        primaries = [c for c in touched if c.is_primary]
        if primaries:
            primaries[-1].make_primary()


@admin.register(Contact)
class ContactAdmin(SoftDeleteAdmin):
    list_display = (
        "name",
        "client",
        "position",
        "email",
        "phone",
        "is_primary",
        "trashed",
    )
    list_filter = ("is_primary",)
    search_fields = ("name", "email", "client__name", "client__company")
    readonly_fields = ("created_at", "updated_at", "deleted_at")
    actions = ("restore_selected", "hard_delete_selected", "make_primary")

    def save_model(self, request, obj: Contact, form, change: bool) -> None:
        super().save_model(request, obj, form, change)
        if obj.is_primary:
            obj.make_primary()

    @admin.action(description="Make primary contact of its client")
    def make_primary(self, request, queryset):
        seen = set()
        for contact in queryset.order_by("client_id", "-pk"):
            if contact.client_id in seen:
                continue
            contact.make_primary()
            seen.add(contact.client_id)
        self.message_user(
            request,
            f"Set primary contact for {len(seen)} client(s).",
            level=messages.SUCCESS,
        )
