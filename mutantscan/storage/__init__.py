# Storage package for MutantScan
"""
Record store modules.

Persist one verdict per distinct grid fingerprint and expose the
verdict counts used for stats.
"""
