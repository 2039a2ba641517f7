"""Pull request loading, classification and reviewer collection."""

from .core import PullRequestAnalyzer, filter_approved, filter_pending, get_statistics
from .collector import ReviewerCollector

__all__ = [
    'PullRequestAnalyzer',
    'ReviewerCollector',
    'filter_approved',
    'filter_pending',
    'get_statistics',
]
