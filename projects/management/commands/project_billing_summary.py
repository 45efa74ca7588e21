from __future__ import annotations

import json

from core.crm_config import get_crm_config
from django.core.management.base import BaseCommand, CommandError
from projects.models import Project
from projects.services.overview import rate_description


class Command(BaseCommand):
    help = (
        "Show billable hours, billable amount and budget status "
        "for one project or all live projects."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--project-id",
            type=int,
            default=None,
            help="Project ID (default: all live projects)",
        )
        parser.add_argument(
            "--json",
            action="store_true",
            help="Output JSON only (no human text)",
        )

    def handle(self, *args, **opts):
        project_id = opts.get("project_id")
        config = get_crm_config()

        if project_id:
            try:
                projects = [Project.all_objects.get(id=project_id)]
            except Project.DoesNotExist:
                raise CommandError(f"Project not found: id={project_id}")
        else:
            projects = list(Project.objects.select_related("client"))

        rows = []
        for project in projects:
            hours = project.total_billable_hours
            rows.append(
                {
                    "project_id": project.id,
                    "name": project.name,
                    "client": project.client.name,
                    "status": project.status,
                    "rate_type": project.rate_type,
                    "billable_hours": str(hours),
                    "billable_amount": str(project.total_billable_amount),
                    "budget_hours": project.budget_hours,
                    "over_budget": project.is_over_budget(),
                    "billing": rate_description(project, hours, config=config),
                }
            )

        if opts["json"]:
            self.stdout.write(json.dumps(rows, indent=2))
            return

        for row in rows:
            line = (
                f"{row['name']} ({row['client']}): {row['billable_hours']} hrs, "
                f"{row['billable_amount']} {config.currency} [{row['billing']}]"
            )
            if row["over_budget"]:
                self.stdout.write(self.style.WARNING(f"{line} OVER BUDGET"))
            else:
                self.stdout.write(line)
