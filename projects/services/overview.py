from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List

from core.crm_config import CrmConfig
from django.db.models import Sum
from projects.models import Project, TimeEntry
from projects.services.aggregates import is_over_budget, total_billable_hours


@dataclass
class ProjectHoursStat:
    project_id: int
    name: str
    billable_hours: Decimal
    description: str
    over_budget: bool
    chart: List[float] = field(default_factory=list)

    @property
    def label(self) -> str:
        return f"{self.billable_hours:.2f} hrs"


def rate_description(
    project: Project, billable_hours: Decimal, *, config: CrmConfig
) -> str:
    symbol = config.currency_symbol
    if project.rate_type == Project.RATE_HOURLY:
        rate = project.hourly_rate or Decimal("0")
        return f"{symbol}{rate:.2f}/hr × {billable_hours:.2f} hrs"
    if project.rate_type == Project.RATE_FIXED:
        price = project.fixed_price or Decimal("0")
        return f"Fixed: {symbol}{price:.2f}"
    if project.rate_type == Project.RATE_RETAINER:
        return "Retainer"
    return ""


def daily_billable_hours(project: Project, *, points: int = 7) -> List[float]:
    """
    Billable hours per day, oldest first, at most ``points`` days.
    [0] when the project has no billable time.
    """
    rows = (
        TimeEntry.objects.filter(project=project, billable=True)
        .values("date")
        .annotate(total_hours=Sum("hours"))
        .order_by("date")[:points]
    )
    chart = [float(r["total_hours"]) for r in rows]
    return chart or [0]


def billable_hours_overview(
    *, config: CrmConfig, chart_points: int = 7
) -> List[ProjectHoursStat]:
    """
    One stat per live project that has time entries, in name order.
    """
    projects = (
        Project.objects.filter(time_entries__isnull=False).distinct().order_by("name")
    )

    stats: List[ProjectHoursStat] = []
    for project in projects:
        hours = total_billable_hours(project)
        stats.append(
            ProjectHoursStat(
                project_id=project.id,
                name=project.name,
                billable_hours=hours,
                description=rate_description(project, hours, config=config),
                over_budget=is_over_budget(project),
                chart=daily_billable_hours(project, points=chart_points),
            )
        )
    return stats
