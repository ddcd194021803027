"""SQLite-backed storage handle for the ``people`` table."""
from __future__ import annotations

import logging
import sqlite3
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .models import Person, person_from_row

logger = logging.getLogger("peopleapi.database")

Params = Sequence[object]


class DatabaseError(RuntimeError):
    """Raised when a statement against the storage backend fails."""


class DatabaseUnavailableError(DatabaseError):
    """Raised when the backend cannot be reached or the handle is closed."""


@dataclass(frozen=True)
class StatementResult:
    rowcount: int
    lastrowid: Optional[int]


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


class Database:
    """One long-lived connection to the relational backend.

    The handle is constructed closed; :meth:`connect` opens it and verifies
    liveness with a round-trip probe. Statements run in autocommit mode so
    each one is its own transaction.
    """

    def __init__(self, path: Path, *, timeout: float = 5.0) -> None:
        self._path = Path(path)
        self._timeout = timeout
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def connect(self) -> None:
        """Open the connection and probe it; raise if the backend is unreachable."""

        if self._conn is not None:
            return

        try:
            _ensure_directory(self._path)
            conn = sqlite3.connect(
                self._path,
                timeout=self._timeout,
                check_same_thread=False,
                isolation_level=None,
            )
        except (OSError, sqlite3.Error) as exc:
            raise DatabaseUnavailableError(f"Unable to open database at {self._path}: {exc}") from exc

        conn.row_factory = sqlite3.Row
        try:
            conn.execute("SELECT 1").fetchone()
        except sqlite3.Error as exc:
            conn.close()
            raise DatabaseUnavailableError(f"Database at {self._path} did not answer the probe: {exc}") from exc

        self._conn = conn
        logger.info("Connected to the database at %s", self._path)

    def ping(self) -> None:
        self.fetch_one("SELECT 1")

    def close(self) -> None:
        with self._lock:
            conn, self._conn = self._conn, None
        if conn is not None:
            conn.close()
            logger.info("Closed database connection to %s", self._path)

    def initialize(self) -> None:
        """Create the ``people`` table if it does not already exist."""

        self.execute(
            """
            CREATE TABLE IF NOT EXISTS people (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT,
                email TEXT
            )
            """
        )

    # ------------------------------------------------------------------
    # Statement primitives
    # ------------------------------------------------------------------
    def _require_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise DatabaseUnavailableError("Database connection is not open")
        return self._conn

    def fetch_all(self, sql: str, params: Params = ()) -> List[sqlite3.Row]:
        with self._lock:
            conn = self._require_connection()
            try:
                return conn.execute(sql, tuple(params)).fetchall()
            except sqlite3.Error as exc:
                raise DatabaseError(str(exc)) from exc

    def fetch_one(self, sql: str, params: Params = ()) -> Optional[sqlite3.Row]:
        with self._lock:
            conn = self._require_connection()
            try:
                return conn.execute(sql, tuple(params)).fetchone()
            except sqlite3.Error as exc:
                raise DatabaseError(str(exc)) from exc

    def execute(self, sql: str, params: Params = ()) -> StatementResult:
        with self._lock:
            conn = self._require_connection()
            try:
                cursor = conn.execute(sql, tuple(params))
            except sqlite3.Error as exc:
                raise DatabaseError(str(exc)) from exc
            return StatementResult(rowcount=cursor.rowcount, lastrowid=cursor.lastrowid)

    # ------------------------------------------------------------------
    # People
    # ------------------------------------------------------------------
    def create_person(self, name: str, email: str) -> Person:
        result = self.execute(
            "INSERT INTO people (name, email) VALUES (?, ?)",
            (name, email),
        )
        if result.lastrowid is None:
            raise DatabaseError("Insert did not return a row id")
        return Person(id=int(result.lastrowid), name=name, email=email)

    def list_people(self) -> List[Person]:
        rows = self.fetch_all("SELECT id, name, email FROM people")
        return [person_from_row(row) for row in rows]

    def get_person(self, person_id: int) -> Optional[Person]:
        row = self.fetch_one("SELECT id, name, email FROM people WHERE id = ?", (person_id,))
        if row is None:
            return None
        return person_from_row(row)

    def update_person(self, person_id: int, *, name: str, email: str) -> int:
        """Overwrite name and email; returns the number of rows touched."""

        result = self.execute(
            "UPDATE people SET name = ?, email = ? WHERE id = ?",
            (name, email, person_id),
        )
        return result.rowcount

    def delete_person(self, person_id: int) -> int:
        result = self.execute("DELETE FROM people WHERE id = ?", (person_id,))
        return result.rowcount


__all__ = [
    "Database",
    "DatabaseError",
    "DatabaseUnavailableError",
    "StatementResult",
]
