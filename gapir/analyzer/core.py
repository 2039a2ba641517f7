"""Main pull request analyzer for the API reviewers workflow."""

import logging
from typing import Iterable, List, Optional, Set

from ..api_client import AzureDevOpsAuthError, AzureDevOpsClient
from ..classifier import NOT_A_REVIEWER, ReviewerClassifier
from ..config import AzureDevOpsConfiguration
from ..group_service import ApiReviewersGroupService
from ..models import (AnalysisResult, CurrentUser, PullRequest, PullRequestDiagnosis, PullRequestInfo,
                      PullRequestStatistics)
from ..reviewers_config import ReviewersConfigStore


def filter_pending(infos: Iterable[PullRequestInfo]) -> List[PullRequestInfo]:
    """PRs still waiting on the current user as an active reviewer."""
    return [i for i in infos
            if not i.is_approved_by_me and i.my_vote_status != NOT_A_REVIEWER and not i.is_completed]


def filter_approved(infos: Iterable[PullRequestInfo]) -> List[PullRequestInfo]:
    """PRs the current user approved that are not completed yet."""
    return [i for i in infos if i.is_approved_by_me and not i.is_completed]


def get_statistics(infos: Iterable[PullRequestInfo]) -> PullRequestStatistics:
    infos = list(infos)
    return PullRequestStatistics(
        total_assigned=len(infos),
        pending_review=len(filter_pending(infos)),
        already_approved=len(filter_approved(infos)),
    )


class PullRequestAnalyzer:
    """Loads the pull requests assigned to the current user and classifies them."""

    def __init__(
        self,
        config: AzureDevOpsConfiguration,
        token: str = None,
        api_reviewers: Optional[Set[str]] = None,
        config_store: ReviewersConfigStore = None,
        include_last_change: bool = True,
        match_display_name: bool = True
    ):
        """Initialize the analyzer.

        Args:
            config: Organization, project, repository and reviewers group
            token: Azure DevOps personal access token
            api_reviewers: Membership to use instead of resolving the reviewers group
            config_store: Where the fallback reviewers list is read from
            include_last_change: Fetch threads and iterations for the Change column
            match_display_name: Resolve the current user by display name as a fallback
        """
        self.config = config
        self.api_client = AzureDevOpsClient(config.organization_url, config.project, token)
        self.group_service = ApiReviewersGroupService(
            self.api_client, config.reviewers_group, config_store
        )
        self.api_reviewers = api_reviewers
        self.include_last_change = include_last_change
        self.match_display_name = match_display_name

        self.current_user: Optional[CurrentUser] = None
        self.repository_id: Optional[str] = None
        self.classifier: Optional[ReviewerClassifier] = None

        logging.info(f"Initialized analyzer for {config.organization_url}/{config.project}/{config.repository}")

    def resolve_current_user(self) -> CurrentUser:
        """Identify the authenticated user from ``connectionData``."""
        user = self.api_client.get_connection_data()
        current = CurrentUser(
            id=str(user.get('id') or ''),
            display_name=user.get('providerDisplayName') or user.get('customDisplayName') or 'Unknown User',
        )
        logging.info(f"Checking pull requests for user: {current.display_name}")
        return current

    def prepare(self):
        """Resolve user, repository and reviewer membership once per run."""
        self.current_user = self.resolve_current_user()

        repository = self.api_client.get_repository(self.config.repository)
        self.repository_id = repository['id']

        if self.api_reviewers is None:
            logging.info("Loading API reviewers group...")
            self.api_reviewers = self.group_service.get_group_members()

        self.classifier = ReviewerClassifier(
            self.api_reviewers, self.current_user, self.match_display_name
        )

    def load_pull_requests(self) -> AnalysisResult:
        """Fetch and analyze all active PRs that list the current user as reviewer.

        Errors talking to Azure DevOps are reported in ``error_message`` rather
        than raised so callers can render what they have. Rejected credentials
        still raise ``AzureDevOpsAuthError``.
        """
        try:
            self.prepare()

            logging.info("Fetching pull requests...")
            raw_prs = self.api_client.get_pull_requests(
                self.repository_id, status='active', reviewer_id=self.current_user.id
            )
            print(f"Found {len(raw_prs)} assigned pull requests")

            infos = self._analyze_parallel(raw_prs)
            return AnalysisResult(current_user=self.current_user, pull_requests=infos)

        except AzureDevOpsAuthError:
            raise
        except Exception as e:
            logging.error(f"Error occurred while checking pull requests: {e}")
            user = self.current_user or CurrentUser(id='', display_name='Unknown User')
            return AnalysisResult(current_user=user, error_message=str(e))

    def diagnose_pull_request(self, pull_request_id: int) -> PullRequestDiagnosis:
        """Fetch one PR and report how its reviewers are classified for the current user."""
        self.prepare()
        pr = PullRequest.from_api(self.api_client.get_pull_request(self.repository_id, pull_request_id))
        return PullRequestDiagnosis(
            pull_request=pr,
            current_user=self.current_user,
            my_entry=self.classifier.find_current_user(pr),
            my_vote_status=self.classifier.my_vote_status(pr),
            api_approval_ratio=self.classifier.api_approval_ratio(pr),
            api_reviewer_ids=[r.identifier for r in pr.reviewers or () if self.classifier.is_api_reviewer(r)],
        )


# Import and attach methods from submodules
from .processing import _analyze_parallel, analyze_pull_request
from .activity import _time_assigned, _last_change_info

# Attach methods to class
PullRequestAnalyzer._analyze_parallel = _analyze_parallel
PullRequestAnalyzer.analyze_pull_request = analyze_pull_request
PullRequestAnalyzer._time_assigned = _time_assigned
PullRequestAnalyzer._last_change_info = _last_change_info
