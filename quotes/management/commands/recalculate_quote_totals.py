from __future__ import annotations

import json

from django.core.management.base import BaseCommand, CommandError
from quotes.tasks import (
    recalculate_all_quote_totals_task,
    recalculate_quote_totals_task,
)


class Command(BaseCommand):
    help = "Recalculate subtotal / tax / total of one quote or of all live quotes."

    def add_arguments(self, parser):
        group = parser.add_mutually_exclusive_group(required=True)
        group.add_argument("--quote-id", type=int, help="Quote ID to recalculate")
        group.add_argument(
            "--all", action="store_true", help="Recalculate every live quote"
        )
        parser.add_argument("--async", dest="run_async", action="store_true")

    def handle(self, *args, **opts):
        if opts["all"]:
            task, kwargs = recalculate_all_quote_totals_task, {}
        else:
            task = recalculate_quote_totals_task
            kwargs = {"quote_id": opts["quote_id"]}

        if opts["run_async"]:
            ar = task.delay(**kwargs)
            self.stdout.write(
                json.dumps({"queued": True, "task_id": ar.id, **kwargs}, indent=2)
            )
            return

        try:
            res = task.run(**kwargs)
        except Exception as e:
            raise CommandError(str(e))

        self.stdout.write(json.dumps(res, indent=2))
        self.stdout.write(self.style.SUCCESS("Quote totals recalculated."))
