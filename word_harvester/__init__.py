"""Incremental dictionary lookup, caching and merge pipeline."""

__version__ = "0.3.0"
