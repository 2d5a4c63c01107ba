"""SQLite-backed opportunity store."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path
from threading import Lock

from ..errors import DuplicateFingerprint, StoreError
from ..models import CanonicalOpportunity, isoformat_utc
from .base import OpportunityStore

_COLUMNS = (
    "site",
    "name",
    "url",
    "deadline",
    "locale",
    "category",
    "description",
    "target_audience",
    "public_info",
    "fingerprint",
    "created_at",
    "last_seen_at",
)


class SQLiteOpportunityStore(OpportunityStore):
    """Single-connection SQLite store with a UNIQUE fingerprint column."""

    def __init__(self, path: Path | str) -> None:
        self.path = path if str(path) == ":memory:" else Path(path)
        if isinstance(self.path, Path):
            self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = Lock()
        try:
            self._conn = sqlite3.connect(str(self.path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._ensure_schema()
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot open opportunity store at {path}: {exc}") from exc

    def _ensure_schema(self) -> None:
        self._conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS opportunities (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                site TEXT NOT NULL,
                name TEXT NOT NULL,
                url TEXT NOT NULL,
                deadline TEXT,
                locale TEXT,
                category TEXT,
                description TEXT,
                target_audience TEXT,
                public_info TEXT,
                fingerprint TEXT NOT NULL UNIQUE,
                created_at TEXT NOT NULL,
                last_seen_at TEXT NOT NULL
            );
            CREATE INDEX IF NOT EXISTS idx_opportunities_site ON opportunities(site);
            CREATE INDEX IF NOT EXISTS idx_opportunities_deadline ON opportunities(deadline);
            """
        )
        self._conn.commit()

    # ------------------------------------------------------------------
    def find_id_by_fingerprint(self, fingerprint: str) -> int | None:
        with self._lock:
            try:
                row = self._conn.execute(
                    "SELECT id FROM opportunities WHERE fingerprint = ?", (fingerprint,)
                ).fetchone()
            except sqlite3.Error as exc:
                raise StoreError(f"Lookup failed: {exc}") from exc
        return int(row["id"]) if row is not None else None

    def insert(self, opportunity: CanonicalOpportunity) -> int:
        record = opportunity.to_dict()
        values = tuple(record[column] for column in _COLUMNS)
        placeholders = ", ".join("?" for _ in _COLUMNS)
        with self._lock:
            try:
                cursor = self._conn.execute(
                    f"INSERT INTO opportunities ({', '.join(_COLUMNS)}) VALUES ({placeholders})",
                    values,
                )
                self._conn.commit()
            except sqlite3.IntegrityError as exc:
                self._conn.rollback()
                if "fingerprint" in str(exc):
                    raise DuplicateFingerprint(opportunity.fingerprint) from exc
                raise StoreError(f"Insert failed: {exc}") from exc
            except sqlite3.Error as exc:
                self._conn.rollback()
                raise StoreError(f"Insert failed: {exc}") from exc
        return int(cursor.lastrowid)

    def touch(self, record_id: int, seen_at: datetime) -> None:
        with self._lock:
            try:
                cursor = self._conn.execute(
                    "UPDATE opportunities SET last_seen_at = ? WHERE id = ?",
                    (isoformat_utc(seen_at), record_id),
                )
                self._conn.commit()
            except sqlite3.Error as exc:
                self._conn.rollback()
                raise StoreError(f"Update failed: {exc}") from exc
        if cursor.rowcount == 0:
            raise StoreError(f"No opportunity with id {record_id}")

    def search(
        self,
        site: str | None = None,
        query: str | None = None,
        limit: int = 50,
    ) -> list[CanonicalOpportunity]:
        clauses: list[str] = []
        params: list[object] = []
        if site:
            clauses.append("site = ?")
            params.append(site)
        if query:
            pattern = f"%{query}%"
            clauses.append("(name LIKE ? OR description LIKE ? OR category LIKE ?)")
            params.extend([pattern, pattern, pattern])
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        sql = (
            f"SELECT * FROM opportunities {where} "
            "ORDER BY deadline IS NULL, deadline ASC, created_at DESC LIMIT ?"
        )
        params.append(limit)
        with self._lock:
            try:
                rows = self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as exc:
                raise StoreError(f"Search failed: {exc}") from exc
        return [self._row_to_opportunity(row) for row in rows]

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # ------------------------------------------------------------------
    @staticmethod
    def _row_to_opportunity(row: sqlite3.Row) -> CanonicalOpportunity:
        data = {column: row[column] for column in _COLUMNS}
        for key in ("created_at", "last_seen_at"):
            if data[key]:
                data[key] = datetime.fromisoformat(data[key].replace("Z", "+00:00"))
        return CanonicalOpportunity(**data)


__all__ = ["SQLiteOpportunityStore"]
