"""
MutantScan CLI entry point.

Usage:
    python -m mutantscan.cli detect ATGCGA CAGTGC TTATGT AGAAGG CCCCTA TCACTG
    python -m mutantscan.cli stats
"""

import sys
from .main import main

if __name__ == "__main__":
    sys.exit(main())
