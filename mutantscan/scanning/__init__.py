# Scanning package for MutantScan
"""
Run scanning modules.

Counts runs of identical bases in four directions and decides the
mutant verdict, sequentially or row-parallel depending on grid size.
"""
