"""
Core Domain Objects for the MutantScan detection engine.

Domain Objects:
    Grid        — A validated, immutable N×N DNA matrix
    Record      — A persisted (fingerprint, verdict) pair
    Stats       — Derived mutant/human counts and their ratio

Error taxonomy:
    MutantScanError         — Base for every error raised by the engine
    InvalidGridError        — Caller supplied a malformed grid
    FingerprintError        — Hash primitive unavailable or failed
    StoreError              — Backing store failed (lookup/insert/count)
    DuplicateRecordError    — Store rejected a duplicate fingerprint
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


# =============================================================================
# ERRORS
# =============================================================================

class MutantScanError(Exception):
    """Base class for all engine errors."""
    pass


class InvalidGridReason(Enum):
    """
    Distinct rejection reasons for grid validation.

    Checks run in this order:
    EMPTY: Grid is None or has no rows
    NULL_ROW: A row is None
    NOT_SQUARE: A row's length differs from the row count
    INVALID_CHARACTERS: A row contains something other than A, T, C, G
    """
    EMPTY = "grid is null or empty"
    NULL_ROW = "row is null"
    NOT_SQUARE = "not square"
    INVALID_CHARACTERS = "invalid characters"


class InvalidGridError(MutantScanError):
    """Raised when a raw grid fails validation. Always a caller problem."""

    def __init__(self, reason: InvalidGridReason, row_index: Optional[int] = None):
        self.reason = reason
        self.row_index = row_index
        super().__init__(reason.value)


class FingerprintError(MutantScanError):
    """Raised when the content fingerprint cannot be computed."""
    pass


class StoreError(MutantScanError):
    """Raised when the record store fails for reasons other than uniqueness."""
    pass


class DuplicateRecordError(StoreError):
    """Raised when a record with the same fingerprint already exists."""

    def __init__(self, fingerprint: str):
        self.fingerprint = fingerprint
        super().__init__(f"record already exists for fingerprint {fingerprint[:12]}")


# =============================================================================
# GRID
# =============================================================================

@dataclass(frozen=True)
class Grid:
    """
    A validated N×N DNA matrix.

    Grids are only built by the validator, so every instance satisfies:
    - at least one row
    - every row has exactly len(rows) symbols
    - every symbol is one of A, T, C, G

    The row tuple is immutable and may be shared across scan workers.
    """
    rows: tuple[str, ...]

    @property
    def size(self) -> int:
        """Side length N."""
        return len(self.rows)

    def flatten(self) -> str:
        """All rows concatenated in order, with no separator."""
        return "".join(self.rows)


# =============================================================================
# RECORD
# =============================================================================

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Record:
    """
    A persisted verdict for one distinct grid content.

    The fingerprint is the uniqueness key. Records are written once,
    on the first scan of a fingerprint, and never updated.
    """
    fingerprint: str
    is_mutant: bool
    created_at: datetime = field(default_factory=_utcnow)


# =============================================================================
# STATS
# =============================================================================

@dataclass(frozen=True)
class Stats:
    """Aggregate verdict counts over all stored records."""
    count_mutant_dna: int
    count_human_dna: int
    ratio: float

    @classmethod
    def from_counts(cls, count_mutant: int, count_human: int) -> Stats:
        """
        Build stats from raw counts.

        The ratio is mutants / humans, defined as 0.0 when there are no
        humans (never infinity or NaN).
        """
        if count_human == 0:
            ratio = 0.0
        else:
            ratio = count_mutant / count_human

        return cls(
            count_mutant_dna=count_mutant,
            count_human_dna=count_human,
            ratio=ratio,
        )

    def to_dict(self) -> dict:
        """Serializable form, using the public field names."""
        return {
            "count_mutant_dna": self.count_mutant_dna,
            "count_human_dna": self.count_human_dna,
            "ratio": self.ratio,
        }
