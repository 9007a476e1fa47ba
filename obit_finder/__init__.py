"""ObitFinder: obituary search across web-search providers."""

__version__ = "0.1.0"
