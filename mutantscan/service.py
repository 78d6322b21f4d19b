"""
Detection Service for the MutantScan engine.

Ties validation, fingerprinting, scanning and storage into one flow:

    1. Validate the raw rows into a Grid
    2. Fingerprint the Grid
    3. Look up the fingerprint in the record store
    4. Hit:  return the stored verdict, no scan
    5. Miss: select a strategy, scan, insert the Record, return the verdict

Each distinct grid content is scanned at most once, except when two
requests race on the same content. In that case both scan, and the
store's uniqueness constraint rejects the second insert. That rejection
is absorbed here: the scan is a pure function of content, so the losing
request's verdict is still correct.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from .domain import DuplicateRecordError, Grid, Record, Stats
from .fingerprint import fingerprint_grid
from .scanning.scanner import ScanStrategy
from .scanning.strategy import select_strategy
from .storage.store import RecordStore
from .validation import GridValidationResult, validate_grid


logger = logging.getLogger(__name__)


StrategySelector = Callable[[int], ScanStrategy]


def compute_stats(store: RecordStore) -> Stats:
    """Derive stats from the store's verdict counts."""
    count_mutant = store.count(True)
    count_human = store.count(False)
    return Stats.from_counts(count_mutant, count_human)


class MutantService:
    """
    Dedup cache in front of the run scanner.

    Args:
        store: Record store used as the cache and for stats
        selector: Maps grid size to a scan strategy; defaults to
            select_strategy
    """

    def __init__(
        self,
        store: RecordStore,
        selector: Optional[StrategySelector] = None,
    ):
        self.store = store
        self.selector = selector or select_strategy

    def validate(self, rows: Optional[Sequence[Optional[str]]]) -> GridValidationResult:
        """Validate raw rows without raising."""
        return validate_grid(rows)

    def resolve(self, grid: Grid) -> bool:
        """
        Return the verdict for a validated grid, scanning only on a cache miss.

        Raises:
            FingerprintError: If the grid cannot be fingerprinted
            StoreError: If lookup or insert fails (not on duplicates)
        """
        fingerprint = fingerprint_grid(grid)

        existing = self.store.find(fingerprint)
        if existing is not None:
            logger.debug("cache hit %s -> %s", fingerprint[:12], existing.is_mutant)
            return existing.is_mutant

        logger.debug("cache miss %s", fingerprint[:12])
        strategy = self.selector(grid.size)
        is_mutant = strategy.scan(grid)

        try:
            self.store.insert(Record(fingerprint=fingerprint, is_mutant=is_mutant))
        except DuplicateRecordError:
            logger.info("record %s already stored by a concurrent request", fingerprint[:12])
        else:
            logger.info("stored record %s mutant=%s", fingerprint[:12], is_mutant)

        return is_mutant

    def detect(self, rows: Optional[Sequence[Optional[str]]]) -> bool:
        """
        Validate and resolve raw rows end to end.

        Raises:
            InvalidGridError: If the rows do not form a valid grid
            FingerprintError, StoreError: Internal faults, propagated as-is
        """
        result = self.validate(rows)
        if not result.accepted:
            raise result.error
        return self.resolve(result.grid)

    def stats(self) -> Stats:
        """Current mutant/human counts and ratio."""
        return compute_stats(self.store)
