"""pkgdiff - structured diffs between published package versions"""

__version__ = "1.0.0"
