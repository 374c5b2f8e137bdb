"""
L0 Data — static defaults (feature sets, paths, thresholds).
"""
