"""Student, log and assignment data stores.

Two backends satisfy the same small contract:

- `SupabaseDataStore` talks to a Supabase project's PostgREST endpoint
  (`/rest/v1/<table>`), which fronts the Postgres tables `students`, `logs`
  and `assignments`.
- `LocalDataStore` keeps the same tables as JSON files in a directory so the
  agent can run without any hosted services.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

import requests
from pydantic import BaseModel

from university_agent.core.config import DataStoreConfig
from university_agent.integrations.models import Assignment, LogEntry, Student

logger = logging.getLogger(__name__)

STUDENTS_TABLE = "students"
LOGS_TABLE = "logs"
ASSIGNMENTS_TABLE = "assignments"


class DataStore(Protocol):
    def list_students(self) -> list[Student]: ...

    def students_below(self, threshold: float) -> list[Student]: ...

    def list_logs(self) -> list[LogEntry]: ...

    def list_assignments(self) -> list[Assignment]: ...

    def insert_log(self, entry: LogEntry) -> LogEntry: ...


class SupabaseDataStore:
    """Small wrapper around Supabase's PostgREST API for the queries we need."""

    def __init__(
        self,
        *,
        url: str,
        key: str,
        timeout_seconds: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if not url:
            raise ValueError("Supabase URL is required")
        if not key:
            raise ValueError("Supabase key is required")

        self._rest_base_url = url.rstrip("/") + "/rest/v1"
        self._timeout = timeout_seconds
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "apikey": key,
                "Authorization": f"Bearer {key}",
                "Accept": "application/json",
                "User-Agent": "university-agent",
            }
        )
        logger.info("Supabase data store configured", extra={"url": url})

    def _table_url(self, table: str) -> str:
        return f"{self._rest_base_url}/{table}"

    def _select(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        resp = self._session.get(
            self._table_url(table),
            params={"select": "*", **params},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, list):
            raise ValueError(f"Unexpected response for table {table!r}: expected a list")
        return data

    def list_students(self) -> list[Student]:
        rows = self._select(STUDENTS_TABLE, {"order": "name.asc"})
        return [Student.model_validate(row) for row in rows]

    def students_below(self, threshold: float) -> list[Student]:
        rows = self._select(STUDENTS_TABLE, {"attendance": f"lt.{threshold!r}"})
        return [Student.model_validate(row) for row in rows]

    def list_logs(self) -> list[LogEntry]:
        rows = self._select(LOGS_TABLE, {"order": "timestamp.desc"})
        return [LogEntry.model_validate(row) for row in rows]

    def list_assignments(self) -> list[Assignment]:
        rows = self._select(ASSIGNMENTS_TABLE, {})
        return [Assignment.model_validate(row) for row in rows]

    def insert_log(self, entry: LogEntry) -> LogEntry:
        resp = self._session.post(
            self._table_url(LOGS_TABLE),
            json=entry.model_dump(mode="json", exclude_none=True),
            headers={"Prefer": "return=representation"},
            timeout=self._timeout,
        )
        resp.raise_for_status()
        data = resp.json()
        if isinstance(data, list) and data and isinstance(data[0], dict):
            return LogEntry.model_validate(data[0])
        return entry

    def close(self) -> None:
        self._session.close()


def _safe_load_json_list(path: Path) -> list[dict[str, object]]:
    if not path.exists():
        return []
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        logger.warning("Data file is not valid JSON; treating as empty", extra={"path": str(path)})
        return []
    if not isinstance(raw, list):
        logger.warning("Data file has unexpected shape; treating as empty", extra={"path": str(path)})
        return []
    return [item for item in raw if isinstance(item, dict)]


def _save_json_list(path: Path, items: Sequence[BaseModel]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [m.model_dump(mode="json") for m in items]
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


class LocalDataStore:
    """JSON-file backed store: `<root>/students.json`, `logs.json`, `assignments.json`."""

    def __init__(self, root: Path) -> None:
        self._root = root
        self._lock = threading.Lock()

    @property
    def root(self) -> Path:
        return self._root

    def _path(self, table: str) -> Path:
        return self._root / f"{table}.json"

    def list_students(self) -> list[Student]:
        with self._lock:
            raw = _safe_load_json_list(self._path(STUDENTS_TABLE))
        students = [Student.model_validate(item) for item in raw]
        students.sort(key=lambda s: s.name.lower())
        return students

    def students_below(self, threshold: float) -> list[Student]:
        return [s for s in self.list_students() if s.attendance < threshold]

    def list_logs(self) -> list[LogEntry]:
        with self._lock:
            raw = _safe_load_json_list(self._path(LOGS_TABLE))
        logs = [LogEntry.model_validate(item) for item in raw]
        logs.sort(key=lambda e: e.timestamp, reverse=True)
        return logs

    def list_assignments(self) -> list[Assignment]:
        with self._lock:
            raw = _safe_load_json_list(self._path(ASSIGNMENTS_TABLE))
        return [Assignment.model_validate(item) for item in raw]

    def insert_log(self, entry: LogEntry) -> LogEntry:
        with self._lock:
            path = self._path(LOGS_TABLE)
            logs = [LogEntry.model_validate(item) for item in _safe_load_json_list(path)]
            stored = entry if entry.id is not None else entry.model_copy(update={"id": len(logs) + 1})
            logs.append(stored)
            _save_json_list(path, logs)
        return stored

    def seed(self, *, students: Sequence[Student] = (), assignments: Sequence[Assignment] = ()) -> None:
        """Write student and assignment tables (used by demos and tests)."""
        with self._lock:
            _save_json_list(self._path(STUDENTS_TABLE), students)
            _save_json_list(self._path(ASSIGNMENTS_TABLE), assignments)


def create_data_store(config: DataStoreConfig) -> DataStore:
    """Build the configured backend.

    Raises:
        ValueError: If the Supabase backend is selected without credentials.
    """
    if config.backend == "supabase":
        return SupabaseDataStore(
            url=config.supabase_url or "",
            key=config.supabase_key or "",
            timeout_seconds=config.timeout_seconds,
        )
    logger.info("Using local data store", extra={"path": str(config.local_path)})
    return LocalDataStore(config.local_path)
