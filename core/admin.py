from __future__ import annotations

from django.contrib import admin, messages
from django.utils import timezone


class TrashedFilter(admin.SimpleListFilter):
    title = "trashed"
    parameter_name = "trashed"

    def lookups(self, request, model_admin):
        return (
            ("with", "With trashed"),
            ("only", "Only trashed"),
        )

    def queryset(self, request, queryset):
        if self.value() == "with":
            return queryset
        if self.value() == "only":
            return queryset.filter(deleted_at__isnull=False)
        return queryset.filter(deleted_at__isnull=True)


class SoftDeleteAdmin(admin.ModelAdmin):
    """
    Lists live rows by default; the trashed filter reveals soft-deleted ones.
    Deleting from the admin only flags rows; "Delete permanently" removes
    them together with their dependents.
    """

    actions = ("restore_selected", "hard_delete_selected")

    def get_queryset(self, request):
        qs = self.model.all_objects.get_queryset()
        ordering = self.get_ordering(request)
        if ordering:
            qs = qs.order_by(*ordering)
        return qs

    def get_list_filter(self, request):
        return (TrashedFilter, *super().get_list_filter(request))

    @admin.display(boolean=True, description="Trashed?")
    def trashed(self, obj) -> bool:
        return obj.is_trashed

    @admin.action(description="Restore selected (undo delete)")
    def restore_selected(self, request, queryset):
        restored = queryset.filter(deleted_at__isnull=False).update(deleted_at=None)
        self.message_user(
            request, f"Restored {restored} record(s).", level=messages.SUCCESS
        )

    @admin.action(description="Delete selected permanently")
    def hard_delete_selected(self, request, queryset):
        deleted, _ = queryset.hard_delete()
        self.message_user(
            request,
            f"Permanently deleted {deleted} row(s) including dependents.",
            level=messages.WARNING,
        )

    def delete_queryset(self, request, queryset):
        queryset.update(deleted_at=timezone.now())
