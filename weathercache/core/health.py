"""In-memory health registry for operators.

Counts lookup outcomes and provider failures, and remembers the last refresh
sweep.  Everything lives in process memory and resets on restart.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, Optional


@dataclass(frozen=True)
class SweepReport:
    """Summary of one refresher pass over the store."""

    started_at: datetime
    finished_at: datetime
    total: int = 0
    refreshed: int = 0
    failed: int = 0

    def as_dict(self) -> Dict[str, object]:
        return {
            "started_at": _format_datetime(self.started_at),
            "finished_at": _format_datetime(self.finished_at),
            "total": self.total,
            "refreshed": self.refreshed,
            "failed": self.failed,
        }


class HealthRegistry:
    """Stores lookup counters, provider error counters and sweep stats."""

    def __init__(self) -> None:
        self._lookups: Dict[str, int] = {}
        self._provider_errors: Dict[str, int] = {}
        self._last_sweep: Optional[SweepReport] = None
        self._skipped_sweeps = 0
        self._lock = Lock()

    # -- Lookups ------------------------------------------------------------
    def record_lookup(self, outcome: str) -> None:
        if not outcome:
            raise ValueError("outcome must be provided")
        with self._lock:
            self._lookups[outcome] = self._lookups.get(outcome, 0) + 1

    # -- Provider errors ----------------------------------------------------
    def record_provider_error(self, kind: str, increment: int = 1) -> None:
        if not kind:
            raise ValueError("kind must be provided")
        if increment <= 0:
            raise ValueError("increment must be positive")
        with self._lock:
            self._provider_errors[kind] = self._provider_errors.get(kind, 0) + increment

    # -- Sweeps -------------------------------------------------------------
    def record_sweep(self, report: SweepReport) -> None:
        with self._lock:
            self._last_sweep = report

    def record_skipped_sweep(self) -> None:
        with self._lock:
            self._skipped_sweeps += 1

    # -- Snapshot -----------------------------------------------------------
    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            lookups = dict(self._lookups)
            providers = dict(self._provider_errors)
            last_sweep = self._last_sweep.as_dict() if self._last_sweep else None
            skipped = self._skipped_sweeps
        return {
            "lookups": lookups,
            "providers": providers,
            "refresh": {"last_sweep": last_sweep, "skipped_sweeps": skipped},
        }


def _format_datetime(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()
