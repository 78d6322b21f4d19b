# MutantScan
# DNA mutant detection engine

"""
Classifies an N×N DNA grid as mutant when it holds more than one run of
four identical bases (horizontal, vertical or diagonal), and caches one
verdict per distinct grid content.
"""
