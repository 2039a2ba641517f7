"""gapir - Azure DevOps API review pull request checker."""

from .models import CurrentUser, PullRequest, PullRequestInfo, ReviewerVote
from .classifier import ReviewerClassifier
from .config import AzureDevOpsConfiguration
from .api_client import AzureDevOpsClient, AzureDevOpsAuthError
from .reviewers_config import ReviewersConfigStore, ReviewersConfiguration
from .group_service import ApiReviewersGroupService
from .analyzer import PullRequestAnalyzer, ReviewerCollector
from .output import OutputFormatter

__all__ = [
    'CurrentUser',
    'PullRequest',
    'PullRequestInfo',
    'ReviewerVote',
    'ReviewerClassifier',
    'AzureDevOpsConfiguration',
    'AzureDevOpsClient',
    'AzureDevOpsAuthError',
    'ReviewersConfigStore',
    'ReviewersConfiguration',
    'ApiReviewersGroupService',
    'PullRequestAnalyzer',
    'ReviewerCollector',
    'OutputFormatter',
]
