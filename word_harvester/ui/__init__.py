"""User interaction helpers."""

from .progress import ProgressReporter, ProgressState

__all__ = ["ProgressReporter", "ProgressState"]
