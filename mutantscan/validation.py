"""
Grid Validation for the MutantScan detection engine.

Validation is all-or-nothing: a raw grid either becomes an immutable
Grid or is rejected with exactly one reason. There is no partial grid.

Checks (in order, per row):
1. The grid itself is present and non-empty
2. No row is None
3. Every row has length N, where N is the number of rows
4. Every row consists only of A, T, C, G
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from .domain import Grid, InvalidGridError, InvalidGridReason


logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

VALID_BASES = frozenset("ATCG")

# One or more uppercase bases, nothing else
ROW_PATTERN = re.compile("[" + "".join(sorted(VALID_BASES)) + "]+")


# =============================================================================
# ROW CHECKS
# =============================================================================

def validate_rows_present(rows: Optional[Sequence[Optional[str]]]) -> None:
    """
    Only a list or tuple of rows counts as a grid. None, a bare string,
    a number and a mapping are all treated as no grid at all.

    Raises:
        InvalidGridError: If the grid is None, not a sequence of rows,
            or has no rows (EMPTY)
    """
    if not isinstance(rows, (list, tuple)):
        raise InvalidGridError(InvalidGridReason.EMPTY)
    if len(rows) == 0:
        raise InvalidGridError(InvalidGridReason.EMPTY)


def validate_row(row: Optional[str], size: int, row_index: int) -> None:
    """
    Validate a single row against the expected side length.

    Raises:
        InvalidGridError: NULL_ROW, NOT_SQUARE or INVALID_CHARACTERS
    """
    if row is None:
        raise InvalidGridError(InvalidGridReason.NULL_ROW, row_index)

    if not isinstance(row, str):
        raise InvalidGridError(InvalidGridReason.INVALID_CHARACTERS, row_index)

    if len(row) != size:
        raise InvalidGridError(InvalidGridReason.NOT_SQUARE, row_index)

    if not ROW_PATTERN.fullmatch(row):
        raise InvalidGridError(InvalidGridReason.INVALID_CHARACTERS, row_index)


def parse_grid(rows: Optional[Sequence[Optional[str]]]) -> Grid:
    """
    Validate raw rows and build a Grid.

    Raises:
        InvalidGridError: On the first failed check
    """
    validate_rows_present(rows)

    size = len(rows)
    for index, row in enumerate(rows):
        validate_row(row, size, index)

    return Grid(rows=tuple(rows))


# =============================================================================
# RESULT-TYPED VALIDATION
# =============================================================================

@dataclass
class GridValidationResult:
    """Result of validating a raw grid. Exactly one of grid/error is set."""
    accepted: bool
    grid: Optional[Grid] = None
    error: Optional[InvalidGridError] = None

    @property
    def reason(self) -> Optional[InvalidGridReason]:
        return self.error.reason if self.error else None


def validate_grid(rows: Optional[Sequence[Optional[str]]]) -> GridValidationResult:
    """
    Apply all grid checks without raising.

    Returns:
        GridValidationResult with either accepted=True and a Grid, or
        accepted=False and the InvalidGridError describing the reason
    """
    try:
        grid = parse_grid(rows)
    except InvalidGridError as e:
        logger.debug("grid rejected: %s (row %s)", e.reason.value, e.row_index)
        return GridValidationResult(accepted=False, error=e)

    return GridValidationResult(accepted=True, grid=grid)
