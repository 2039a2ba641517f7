"""Console output for gapir."""

from .console import OutputFormatter

__all__ = ['OutputFormatter']
