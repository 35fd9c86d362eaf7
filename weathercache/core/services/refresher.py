"""Periodic refresh of every stored weather record."""
from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Optional

from ..abstractions import WeatherClient, WeatherRecordStore, format_temperature
from ..health import HealthRegistry, SweepReport
from ..locks import KeyedLocks
from ..providers.base import FetchError


logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MS = 60 * 60 * 1000


class WeatherRefresher:
    """Re-fetch every stored record on a fixed delay.

    Only one sweep runs at a time; a sweep requested while another is in
    progress is skipped.  Each record is refreshed under the same per-key lock
    the lookup service uses.
    """

    def __init__(
        self,
        client: WeatherClient,
        store: WeatherRecordStore,
        locks: Optional[KeyedLocks] = None,
        interval_ms: int = DEFAULT_INTERVAL_MS,
        health: Optional[HealthRegistry] = None,
    ) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self._client = client
        self._store = store
        self._locks = locks or KeyedLocks()
        self._health = health
        self.interval_ms = interval_ms
        self._running = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000.0

    # -- Sweeps -------------------------------------------------------------
    def sweep(self) -> Optional[SweepReport]:
        """Refresh all records; return ``None`` if a sweep is already running."""
        if not self._running.acquire(blocking=False):
            logger.warning("Refresh sweep already in progress, skipping")
            if self._health is not None:
                self._health.record_skipped_sweep()
            return None
        try:
            report = self._sweep()
        finally:
            self._running.release()
        if self._health is not None:
            self._health.record_sweep(report)
        logger.info(
            "Refresh sweep finished: %s refreshed, %s failed of %s",
            report.refreshed,
            report.failed,
            report.total,
        )
        return report

    def _sweep(self) -> SweepReport:
        started_at = datetime.now(timezone.utc)
        records = self._store.find_all()
        refreshed = failed = 0
        for record in records:
            with self._locks.hold(record.lookup_key):
                try:
                    response = self._client.fetch(record.query)
                except FetchError as exc:
                    logger.warning("Skipping refresh of %s: %s", record.lookup_key, exc)
                    if self._health is not None:
                        self._health.record_provider_error(type(exc).__name__)
                    failed += 1
                    continue

                record.temperature = format_temperature(response.temperature_c)
                record.description = response.condition
                try:
                    self._store.save(record)
                except Exception:  # noqa: BLE001 - one bad row must not abort the sweep
                    logger.exception("Failed to save refreshed record %s", record.lookup_key)
                    failed += 1
                    continue
                refreshed += 1
        return SweepReport(
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
            total=len(records),
            refreshed=refreshed,
            failed=failed,
        )

    # -- Scheduling ---------------------------------------------------------
    def run_forever(self, run_immediately: bool = True) -> None:
        """Sweep, then wait ``interval_ms``, until :meth:`stop` is called."""
        logger.info("Starting weather refresher every %s ms", self.interval_ms)
        if not run_immediately and self._stop.wait(self.interval_seconds):
            return
        while not self._stop.is_set():
            try:
                self.sweep()
            except Exception:  # pragma: no cover - logged for visibility
                logger.exception("Refresh sweep failed")
            if self._stop.wait(self.interval_seconds):
                break
        logger.info("Weather refresher stopped")

    def start(self, run_immediately: bool = True) -> threading.Thread:
        if self._thread is not None and self._thread.is_alive():
            return self._thread
        self._stop.clear()
        self._thread = threading.Thread(
            target=self.run_forever,
            kwargs={"run_immediately": run_immediately},
            name="weather-refresher",
            daemon=True,
        )
        self._thread.start()
        return self._thread

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None


__all__ = ["DEFAULT_INTERVAL_MS", "WeatherRefresher"]
