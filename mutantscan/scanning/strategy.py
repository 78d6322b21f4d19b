"""
Strategy Selector: choose a scan strategy from the grid size.

Small grids are scanned sequentially because thread coordination costs
more than the scan itself. Both strategies are correct at every size;
the threshold only affects speed.
"""

from __future__ import annotations

import logging
from typing import Optional

from .scanner import ConcurrentScanner, ScanStrategy, SequentialScanner


logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================

PARALLEL_THRESHOLD = 20


def select_strategy(
    size: int,
    threshold: int = PARALLEL_THRESHOLD,
    max_workers: Optional[int] = None,
) -> ScanStrategy:
    """
    Pick the scan strategy for an N×N grid.

    Returns:
        SequentialScanner if size < threshold, else ConcurrentScanner
    """
    if size < threshold:
        strategy: ScanStrategy = SequentialScanner()
    else:
        strategy = ConcurrentScanner(max_workers=max_workers)

    logger.debug("selected %s strategy for %dx%d grid", strategy.name, size, size)
    return strategy
