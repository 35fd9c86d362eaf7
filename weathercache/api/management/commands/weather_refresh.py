"""Management command running the periodic weather refresher."""
from __future__ import annotations

import json
from typing import Any

from django.core.management.base import BaseCommand, CommandError

from weathercache.api.views import get_refresher


class Command(BaseCommand):
    help = "Refresh every stored weather record, once or on a fixed interval"

    def add_arguments(self, parser) -> None:  # noqa: D401
        parser.add_argument("--once", action="store_true", help="Run a single sweep and exit")
        parser.add_argument(
            "--interval-ms",
            dest="interval_ms",
            type=int,
            default=None,
            help="Delay between sweeps (defaults to WEATHER_REFRESH_INTERVAL_MS)",
        )

    def handle(self, *args: Any, **options: Any) -> None:  # noqa: D401
        interval_ms = options.get("interval_ms")
        if interval_ms is not None and interval_ms <= 0:
            raise CommandError("--interval-ms must be positive")

        refresher = get_refresher()

        if options.get("once"):
            report = refresher.sweep()
            self.stdout.write(json.dumps(report.as_dict() if report else {"skipped": True}))
            return

        if interval_ms is not None:
            refresher.interval_ms = interval_ms
        try:
            refresher.run_forever()
        except KeyboardInterrupt:
            refresher.stop()
            self.stdout.write("Refresher stopped")
