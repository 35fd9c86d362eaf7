from datetime import datetime, timedelta, timezone

import pytest

from weathercache.core.health import HealthRegistry, SweepReport


@pytest.fixture()
def registry() -> HealthRegistry:
    registry = HealthRegistry()
    registry.record_lookup("hit")
    registry.record_lookup("hit")
    registry.record_lookup("fetched")
    registry.record_provider_error("NetworkError")
    registry.record_provider_error("ProviderError", increment=3)
    return registry


def test_snapshot_contains_counters(registry: HealthRegistry) -> None:
    snapshot = registry.snapshot()

    assert snapshot["lookups"] == {"hit": 2, "fetched": 1}
    assert snapshot["providers"] == {"NetworkError": 1, "ProviderError": 3}
    assert snapshot["refresh"] == {"last_sweep": None, "skipped_sweeps": 0}


def test_last_sweep_is_reported_in_utc(registry: HealthRegistry) -> None:
    started = datetime(2024, 1, 10, 12, 30, tzinfo=timezone.utc)
    registry.record_sweep(
        SweepReport(started_at=started, finished_at=started + timedelta(seconds=4), total=3, refreshed=2, failed=1)
    )
    registry.record_skipped_sweep()

    refresh = registry.snapshot()["refresh"]

    assert refresh["last_sweep"] == {
        "started_at": "2024-01-10T12:30:00+00:00",
        "finished_at": "2024-01-10T12:30:04+00:00",
        "total": 3,
        "refreshed": 2,
        "failed": 1,
    }
    assert refresh["skipped_sweeps"] == 1


def test_invalid_increments_are_rejected(registry: HealthRegistry) -> None:
    with pytest.raises(ValueError):
        registry.record_provider_error("NetworkError", increment=0)
    with pytest.raises(ValueError):
        registry.record_provider_error("")
