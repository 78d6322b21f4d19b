"""
Content fingerprinting for grid deduplication.

The fingerprint is a SHA-256 digest of all rows concatenated in order,
with no separator. Two grids whose rows join to the same string share a
fingerprint; stored records depend on this, so the scheme must not change.
"""

from __future__ import annotations

import hashlib
from typing import Sequence

from .domain import FingerprintError, Grid


FINGERPRINT_ALGORITHM = "sha256"


def fingerprint_rows(rows: Sequence[str]) -> str:
    """
    Hex digest of the concatenated rows.

    Raises:
        FingerprintError: If the hash algorithm is unavailable
    """
    raw = "".join(rows)
    try:
        digest = hashlib.new(FINGERPRINT_ALGORITHM)
    except ValueError as e:
        raise FingerprintError(
            f"hash algorithm {FINGERPRINT_ALGORITHM} unavailable"
        ) from e

    digest.update(raw.encode("utf-8"))
    return digest.hexdigest()


def fingerprint_grid(grid: Grid) -> str:
    """Fingerprint of a validated grid."""
    return fingerprint_rows(grid.rows)
