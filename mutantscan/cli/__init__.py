# CLI package for MutantScan
"""
Command-line interface for the detection engine.

Commands:
    mutantscan detect  — Classify a DNA grid as mutant or human
    mutantscan stats   — Show mutant/human counts and ratio
"""
