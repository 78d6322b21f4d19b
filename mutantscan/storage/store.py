"""
Record stores for the MutantScan dedup cache.

Store contract:
    find(fingerprint)  -> Record or None
    insert(record)     -> None; DuplicateRecordError if the fingerprint exists
    count(is_mutant)   -> number of records with that verdict

Any other failure surfaces as StoreError. Stores never retry.

Implementations:
    InMemoryRecordStore — process-local dict, for tests and one-shot runs
    SqliteRecordStore   — sqlite3 file (or ":memory:") with a UNIQUE key
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime
from typing import Optional

from ..domain import DuplicateRecordError, Record, StoreError


logger = logging.getLogger(__name__)


# =============================================================================
# BASE
# =============================================================================

class RecordStore:
    """Key-value store of verdicts keyed by fingerprint."""

    def find(self, fingerprint: str) -> Optional[Record]:
        raise NotImplementedError

    def insert(self, record: Record) -> None:
        raise NotImplementedError

    def count(self, is_mutant: bool) -> int:
        raise NotImplementedError

    def close(self) -> None:
        """Release resources. Default: nothing to release."""
        pass

    def __enter__(self) -> RecordStore:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# =============================================================================
# IN-MEMORY
# =============================================================================

class InMemoryRecordStore(RecordStore):
    """Dict-backed store. Safe to share between threads."""

    def __init__(self):
        self._records: dict[str, Record] = {}
        self._lock = threading.Lock()

    def find(self, fingerprint: str) -> Optional[Record]:
        with self._lock:
            return self._records.get(fingerprint)

    def insert(self, record: Record) -> None:
        with self._lock:
            if record.fingerprint in self._records:
                raise DuplicateRecordError(record.fingerprint)
            self._records[record.fingerprint] = record

    def count(self, is_mutant: bool) -> int:
        with self._lock:
            return sum(1 for r in self._records.values() if r.is_mutant == is_mutant)

    def __len__(self) -> int:
        return len(self._records)


# =============================================================================
# SQLITE
# =============================================================================

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS dna_records (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        dna_hash TEXT NOT NULL UNIQUE,
        is_mutant INTEGER NOT NULL,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_is_mutant ON dna_records (is_mutant)",
)


class SqliteRecordStore(RecordStore):
    """
    sqlite3-backed store.

    The UNIQUE constraint on dna_hash is the only guard against two
    requests storing the same content; the losing insert raises
    DuplicateRecordError. One connection is shared and serialised by a lock.
    """

    def __init__(self, path: str = ":memory:"):
        self.path = path
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(path, check_same_thread=False)
            with self._conn:
                for statement in SCHEMA:
                    self._conn.execute(statement)
        except sqlite3.Error as e:
            raise StoreError(f"cannot open record store at {path}: {e}") from e
        logger.debug("opened sqlite record store at %s", path)

    def find(self, fingerprint: str) -> Optional[Record]:
        try:
            with self._lock:
                row = self._conn.execute(
                    "SELECT dna_hash, is_mutant, created_at FROM dna_records WHERE dna_hash = ?",
                    (fingerprint,),
                ).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"lookup failed: {e}") from e

        if row is None:
            return None
        return Record(
            fingerprint=row[0],
            is_mutant=bool(row[1]),
            created_at=datetime.fromisoformat(row[2]),
        )

    def insert(self, record: Record) -> None:
        try:
            with self._lock, self._conn:
                self._conn.execute(
                    "INSERT INTO dna_records (dna_hash, is_mutant, created_at) VALUES (?, ?, ?)",
                    (record.fingerprint, int(record.is_mutant), record.created_at.isoformat()),
                )
        except sqlite3.IntegrityError as e:
            raise DuplicateRecordError(record.fingerprint) from e
        except sqlite3.Error as e:
            raise StoreError(f"insert failed: {e}") from e

    def count(self, is_mutant: bool) -> int:
        try:
            with self._lock:
                row = self._conn.execute(
                    "SELECT COUNT(*) FROM dna_records WHERE is_mutant = ?",
                    (int(is_mutant),),
                ).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"count failed: {e}") from e
        return int(row[0])

    def close(self) -> None:
        with self._lock:
            self._conn.close()
