"""Lightweight database helpers for storing weather records."""
from __future__ import annotations

import os
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, List, Optional
from urllib.parse import unquote, urlparse

import pymysql
from pymysql.cursors import DictCursor

from weathercache.core.abstractions import KeyKind, WeatherRecord, lookup_key


class DatabaseSession:
    """Minimal DB-API session wrapper with context aware placeholders."""

    def __init__(self, connection, placeholder: str, driver: str):
        self.connection = connection
        self.placeholder = placeholder
        self.driver = driver

    # -- DB-API compatibility -------------------------------------------------
    def _prepare_sql(self, sql: str) -> str:
        if self.placeholder == "?":
            return sql
        return sql.replace("?", self.placeholder)

    def execute(self, sql: str, params: tuple = ()):
        cursor = self.connection.cursor()
        cursor.execute(self._prepare_sql(sql), params)
        return cursor

    def fetchone(self, sql: str, params: tuple = ()):
        cursor = self.execute(sql, params)
        row = cursor.fetchone()
        cursor.close()
        return row

    def fetchall(self, sql: str, params: tuple = ()):
        cursor = self.execute(sql, params)
        rows = cursor.fetchall()
        cursor.close()
        return rows

    def commit(self) -> None:
        self.connection.commit()

    def rollback(self) -> None:
        self.connection.rollback()

    def close(self) -> None:
        self.connection.close()


class SessionFactory:
    def __init__(self, url: str, placeholder: str, driver: str):
        self.url = url
        self.placeholder = placeholder
        self.driver = driver

    def __call__(self) -> DatabaseSession:
        connection = create_connection(self.url, self.driver)
        return DatabaseSession(connection, self.placeholder, self.driver)


_engine_lock = threading.Lock()
_database_url: Optional[str] = None
_session_factory: Optional[SessionFactory] = None


# ---------------------------------------------------------------------------

def _default_database_url() -> str:
    return os.getenv("DATABASE_URL", "sqlite:///./weathercache.db")


def configure_engine(url: Optional[str] = None, **_: Any) -> str:
    """Configure database access using the provided URL and create the schema."""

    global _database_url, _session_factory
    with _engine_lock:
        _database_url = url or _default_database_url()
        driver, placeholder = detect_driver(_database_url)
        _session_factory = SessionFactory(_database_url, placeholder, driver)
    run_migrations()
    return _database_url


def detect_driver(url: str) -> tuple[str, str]:
    parsed = urlparse(url)
    if parsed.scheme.startswith("mysql"):
        return "mysql", "%s"
    if parsed.scheme.startswith("sqlite") or parsed.scheme == "":
        return "sqlite", "?"
    raise ValueError(f"Unsupported database scheme: {parsed.scheme}")


def create_connection(url: str, driver: str):
    parsed = urlparse(url)
    if driver == "sqlite":
        path = unquote(parsed.path or parsed.netloc or ":memory:")
        if path.startswith("/"):
            db_path = path
        else:
            db_path = os.path.abspath(path)
        connection = sqlite3.connect(db_path, timeout=10, check_same_thread=False)
        connection.row_factory = sqlite3.Row
        return connection

    if driver == "mysql":
        params = {
            "host": parsed.hostname or "localhost",
            "user": parsed.username,
            "password": parsed.password,
            "database": parsed.path.lstrip("/") or None,
            "port": parsed.port or 3306,
            "charset": "utf8mb4",
            "cursorclass": DictCursor,
            "autocommit": False,
        }
        return pymysql.connect(**params)

    raise ValueError(f"Unsupported driver: {driver}")


def get_session_factory() -> SessionFactory:
    global _session_factory
    if _session_factory is None:
        configure_engine()
    assert _session_factory is not None
    return _session_factory


@contextmanager
def session_scope(session_factory: Optional[SessionFactory] = None):
    factory = session_factory or get_session_factory()
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# ---------------------------------------------------------------------------

CITY_MAX_LENGTH = 255
ZIP_CODE_MAX_LENGTH = 32
# "city:" or "zip:" prefix plus the longest query.
LOOKUP_KEY_MAX_LENGTH = len("city:") + CITY_MAX_LENGTH

_COLUMNS = f"""
    lookup_key VARCHAR({LOOKUP_KEY_MAX_LENGTH}) NOT NULL UNIQUE,
    query VARCHAR({CITY_MAX_LENGTH}) NOT NULL,
    city VARCHAR({CITY_MAX_LENGTH}),
    zip_code VARCHAR({ZIP_CODE_MAX_LENGTH}),
    temperature VARCHAR(32) NOT NULL,
    description VARCHAR(255) NOT NULL,
"""

_SCHEMA = {
    "sqlite": """
        CREATE TABLE IF NOT EXISTS weather_records (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            {columns}            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """,
    "mysql": """
        CREATE TABLE IF NOT EXISTS weather_records (
            id BIGINT PRIMARY KEY AUTO_INCREMENT,
            {columns}            created_at VARCHAR(40) NOT NULL,
            updated_at VARCHAR(40) NOT NULL
        ) CHARACTER SET utf8mb4
    """,
}


def run_migrations(session_factory: Optional[SessionFactory] = None) -> None:
    factory = session_factory or get_session_factory()
    session = factory()
    try:
        session.execute(_SCHEMA[factory.driver].format(columns=_COLUMNS))
        session.commit()
    finally:
        session.close()


# ---------------------------------------------------------------------------

def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _record_from_row(row) -> WeatherRecord:
    return WeatherRecord(
        id=row["id"],
        query=row["query"],
        city=row["city"],
        zip_code=row["zip_code"],
        temperature=row["temperature"],
        description=row["description"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def get_record_by_key(session: DatabaseSession, key: str) -> Optional[WeatherRecord]:
    row = session.fetchone("SELECT * FROM weather_records WHERE lookup_key = ?", (key,))
    if row is None:
        return None
    return _record_from_row(row)


def insert_record(session: DatabaseSession, record: WeatherRecord) -> WeatherRecord:
    now = utcnow_iso()
    cursor = session.execute(
        """
        INSERT INTO weather_records (
            lookup_key, query, city, zip_code, temperature, description, created_at, updated_at
        ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            record.lookup_key,
            record.query,
            record.city,
            record.zip_code,
            record.temperature,
            record.description,
            now,
            now,
        ),
    )
    record.id = cursor.lastrowid
    record.created_at = now
    record.updated_at = now
    return record


def update_record(session: DatabaseSession, record: WeatherRecord) -> WeatherRecord:
    now = utcnow_iso()
    session.execute(
        """
        UPDATE weather_records
        SET city = ?, zip_code = ?, temperature = ?, description = ?, updated_at = ?
        WHERE id = ?
        """,
        (record.city, record.zip_code, record.temperature, record.description, now, record.id),
    )
    record.updated_at = now
    return record


def list_records(session: DatabaseSession) -> List[WeatherRecord]:
    rows = session.fetchall("SELECT * FROM weather_records ORDER BY id")
    return [_record_from_row(row) for row in rows]


def count_records(session: DatabaseSession) -> int:
    row = session.fetchone("SELECT COUNT(*) AS cnt FROM weather_records")
    if isinstance(row, dict):
        return int(row["cnt"])
    return int(row[0])


class SqlWeatherRecordStore:
    """Weather record store backed by the DB-API session layer.

    Every call opens its own session, so the store can be shared between the
    request path and the background refresher.
    """

    def __init__(self, session_factory: Optional[SessionFactory] = None) -> None:
        self._session_factory = session_factory

    def _factory(self) -> SessionFactory:
        return self._session_factory or get_session_factory()

    def find_by_city(self, city: str) -> Optional[WeatherRecord]:
        with session_scope(self._factory()) as session:
            return get_record_by_key(session, lookup_key(KeyKind.CITY, city))

    def find_by_zip_code(self, zip_code: str) -> Optional[WeatherRecord]:
        with session_scope(self._factory()) as session:
            return get_record_by_key(session, lookup_key(KeyKind.ZIP_CODE, zip_code))

    def save(self, record: WeatherRecord) -> WeatherRecord:
        if record.id is not None:
            with session_scope(self._factory()) as session:
                return update_record(session, record)
        try:
            with session_scope(self._factory()) as session:
                return insert_record(session, record)
        except (sqlite3.IntegrityError, pymysql.err.IntegrityError):
            # Another writer created the row first; the first lookup wins.
            with session_scope(self._factory()) as session:
                existing = get_record_by_key(session, record.lookup_key)
            if existing is None:
                raise
            return existing

    def find_all(self) -> List[WeatherRecord]:
        with session_scope(self._factory()) as session:
            return list_records(session)


__all__ = [
    "DatabaseSession",
    "SessionFactory",
    "SqlWeatherRecordStore",
    "configure_engine",
    "count_records",
    "get_record_by_key",
    "get_session_factory",
    "insert_record",
    "list_records",
    "run_migrations",
    "session_scope",
    "update_record",
]
