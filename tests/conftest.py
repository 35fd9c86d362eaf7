from __future__ import annotations

import pytest

from weathercache.core import models


@pytest.fixture()
def session_factory(tmp_path) -> models.SessionFactory:
    models.configure_engine(f"sqlite:///{tmp_path / 'weather.db'}")
    return models.get_session_factory()


@pytest.fixture()
def store(session_factory) -> models.SqlWeatherRecordStore:
    return models.SqlWeatherRecordStore(session_factory)
