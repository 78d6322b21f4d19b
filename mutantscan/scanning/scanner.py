"""
Run Scanner for the MutantScan detection engine.

A run is RUN_LENGTH identical bases along one of four directions,
starting at a given cell:

    HORIZONTAL      →   (row,     col + i)
    VERTICAL        ↓   (row + i, col    )
    DIAGONAL_DOWN   ↘   (row + i, col + i)
    DIAGONAL_UP     ↗   (row - i, col + i)

Every start cell and direction is checked independently, so a stretch
of five identical bases counts as two runs. A grid is a mutant as soon
as more than MUTANT_RUN_THRESHOLD runs have been counted; scanning stops
at that point.

Two strategies produce the same verdict for every grid:
    SequentialScanner — row-major single pass with a local counter
    ConcurrentScanner — one task per row against a shared AtomicCounter
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from enum import Enum
from typing import Iterator, Optional

from ..domain import Grid


logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

RUN_LENGTH = 4

# Mutant when the run count is strictly greater than this
MUTANT_RUN_THRESHOLD = 1


# =============================================================================
# DIRECTIONS
# =============================================================================

class Direction(Enum):
    """Scan directions as (row step, column step)."""
    HORIZONTAL = (0, 1)
    VERTICAL = (1, 0)
    DIAGONAL_DOWN = (1, 1)
    DIAGONAL_UP = (-1, 1)

    @property
    def row_step(self) -> int:
        return self.value[0]

    @property
    def col_step(self) -> int:
        return self.value[1]


# Per-cell evaluation order
SCAN_DIRECTIONS = (
    Direction.HORIZONTAL,
    Direction.VERTICAL,
    Direction.DIAGONAL_DOWN,
    Direction.DIAGONAL_UP,
)


def has_run(grid: Grid, row: int, col: int, direction: Direction) -> bool:
    """
    Check for a run starting at (row, col) in the given direction.

    Returns False when the run would leave the grid.
    """
    size = grid.size
    last_row = row + direction.row_step * (RUN_LENGTH - 1)
    last_col = col + direction.col_step * (RUN_LENGTH - 1)
    if not (0 <= last_row < size and 0 <= last_col < size):
        return False

    base = grid.rows[row][col]
    for i in range(1, RUN_LENGTH):
        r = row + direction.row_step * i
        c = col + direction.col_step * i
        if grid.rows[r][c] != base:
            return False
    return True


def iter_row_runs(grid: Grid, row: int) -> Iterator[tuple[int, Direction]]:
    """Yield (col, direction) for every run starting in the given row."""
    for col in range(grid.size):
        for direction in SCAN_DIRECTIONS:
            if has_run(grid, row, col, direction):
                yield col, direction


# =============================================================================
# SHARED COUNTER
# =============================================================================

class AtomicCounter:
    """
    Monotonic integer counter shared between scan workers.

    increment_and_get is the only mutating operation. Reads are always a
    valid lower bound of the final count.
    """

    def __init__(self, initial: int = 0):
        self._value = initial
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        return self._value

    def increment_and_get(self) -> int:
        with self._lock:
            self._value += 1
            return self._value


# =============================================================================
# STRATEGIES
# =============================================================================

class ScanStrategy:
    """Common contract: scan(grid) -> True if the grid is a mutant."""

    name = "base"

    def scan(self, grid: Grid) -> bool:
        raise NotImplementedError


class SequentialScanner(ScanStrategy):
    """Single-threaded row-major scan with early termination."""

    name = "sequential"

    def scan(self, grid: Grid) -> bool:
        runs = 0
        for row in range(grid.size):
            for _ in iter_row_runs(grid, row):
                runs += 1
                if runs > MUTANT_RUN_THRESHOLD:
                    return True
        return False


def _scan_row(grid: Grid, row: int, counter: AtomicCounter) -> bool:
    """
    Scan one row against the shared counter.

    Returns True as soon as the global count exceeds the threshold,
    whether this worker pushed it over or another worker already had.
    """
    if counter.value > MUTANT_RUN_THRESHOLD:
        return True

    for col in range(grid.size):
        if counter.value > MUTANT_RUN_THRESHOLD:
            return True

        for direction in SCAN_DIRECTIONS:
            if has_run(grid, row, col, direction):
                if counter.increment_and_get() > MUTANT_RUN_THRESHOLD:
                    return True

    return counter.value > MUTANT_RUN_THRESHOLD


class ConcurrentScanner(ScanStrategy):
    """
    Row-parallel scan on a thread pool.

    Rows complete in any order. The first worker reporting a match ends
    the scan: pending rows are cancelled and running rows stop at their
    next counter check.
    """

    name = "concurrent"

    def __init__(self, max_workers: Optional[int] = None):
        self.max_workers = max_workers

    def scan(self, grid: Grid) -> bool:
        counter = AtomicCounter()
        executor = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix="mutantscan-row",
        )
        try:
            futures = [
                executor.submit(_scan_row, grid, row, counter)
                for row in range(grid.size)
            ]
            for future in as_completed(futures):
                if future.result():
                    logger.debug("concurrent scan matched after %d runs", counter.value)
                    return True
            return False
        finally:
            executor.shutdown(wait=False, cancel_futures=True)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def scan_sequential(grid: Grid) -> bool:
    """Scan with the sequential strategy."""
    return SequentialScanner().scan(grid)


def scan_concurrent(grid: Grid, max_workers: Optional[int] = None) -> bool:
    """Scan with the concurrent strategy."""
    return ConcurrentScanner(max_workers=max_workers).scan(grid)
