"""Builds the reviewers configuration from recently completed API review PRs."""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

import requests

from ..api_client import AzureDevOpsClient
from ..config import AzureDevOpsConfiguration
from ..models import PullRequest, ReviewerVote
from ..reviewers_config import ApiReviewer, ReviewersConfigStore, ReviewersConfiguration

MAX_PRS_TO_ANALYZE = 500

SERVICE_ACCOUNT_MARKERS = ('enforcer', 'bot', 'service', 'automation', 'system', 'noreply', 'donotreply')
GROUP_NAME_MARKERS = ('team', 'group', 'reviewers')
BLOCKED_ACCOUNTS = {'esownenf@microsoft.com'}  # Ownership Enforcer


def reviewer_key(reviewer: ReviewerVote) -> Optional[str]:
    """Email of an individual human reviewer, None for groups and service accounts."""
    unique_name = reviewer.unique_name or ''
    if unique_name.startswith('vstfs:'):
        return None
    if '@' not in unique_name:
        return None

    email = unique_name.lower()
    if email in BLOCKED_ACCOUNTS:
        return None
    local_part = email.split('@')[0]
    if any(marker in local_part for marker in SERVICE_ACCOUNT_MARKERS):
        return None

    display_name = reviewer.display_name or ''
    if display_name.startswith('[TEAM FOUNDATION]'):
        return None
    if any(marker in display_name.lower() for marker in GROUP_NAME_MARKERS):
        return None

    return email


class ReviewerCollector:
    """Counts required individual reviewers on PRs that had the reviewers group assigned."""

    def __init__(self, config: AzureDevOpsConfiguration, token: str = None,
                 config_store: ReviewersConfigStore = None, max_prs: int = MAX_PRS_TO_ANALYZE):
        self.config = config
        self.api_client = AzureDevOpsClient(config.organization_url, config.project, token)
        self.config_store = config_store or ReviewersConfigStore()
        self.max_prs = max_prs

    @property
    def group_short_name(self) -> str:
        """Group name without its ``[SCOPE]\\`` prefix."""
        return self.config.reviewers_group.split('\\')[-1]

    def has_reviewers_group(self, pr: PullRequest) -> bool:
        name = self.group_short_name.lower()
        return any(
            name in (r.display_name or '').lower() or name in (r.unique_name or '').lower()
            for r in pr.reviewers or ()
        )

    def count_reviewers(self, prs: List[PullRequest]) -> Dict[str, Tuple[int, str]]:
        """Map reviewer email to (number of API review PRs, display name)."""
        counts: Dict[str, int] = defaultdict(int)
        names: Dict[str, str] = {}
        for pr in prs:
            if not self.has_reviewers_group(pr):
                continue
            for reviewer in pr.reviewers or ():
                if not reviewer.is_required:
                    continue
                key = reviewer_key(reviewer)
                if key is None:
                    continue
                counts[key] += 1
                names[key] = reviewer.display_name or key
        return {key: (count, names[key]) for key, count in counts.items()}

    def collect(self) -> ReviewersConfiguration:
        """Scan completed PRs, print the reviewers found and save the configuration."""
        print("Pull Request Required Reviewers Analyzer")
        print("=" * 50)
        print(f"\nAnalyzing repository: {self.config.repository}")
        print(f"Fetching recent pull requests (limit: {self.max_prs})...")

        repository = self.api_client.get_repository(self.config.repository)
        raw_prs = self.api_client.get_pull_requests(repository['id'], status='completed', limit=self.max_prs)
        print(f"Found {len(raw_prs)} completed pull requests")

        prs = []
        for data in raw_prs:
            try:
                pr = PullRequest.from_api(data)
            except (KeyError, TypeError, ValueError) as e:
                logging.warning(f"Skipping malformed pull request payload: {e}")
                continue
            # list results can omit reviewers, fetch details then
            if pr.reviewers is None:
                try:
                    pr = PullRequest.from_api(self.api_client.get_pull_request(repository['id'], pr.pull_request_id))
                except requests.RequestException as e:
                    logging.warning(f"Failed to analyze PR #{pr.pull_request_id}: {e}")
                    continue
            prs.append(pr)

        api_review_prs = [pr for pr in prs if self.has_reviewers_group(pr)]
        print(f"Found {len(api_review_prs)} API review PRs")

        counts = self.count_reviewers(api_review_prs)
        ranked = sorted(counts.items(), key=lambda item: (-item[1][0], item[0]))

        print(f"\nFound {len(ranked)} unique API reviewers:")
        for email, (count, _) in ranked:
            print(f"  {email} - Required in {count} PRs")

        configuration = ReviewersConfiguration(
            reviewers=[ApiReviewer(email, name, count) for email, (count, name) in ranked],
            source=f"Generated from {len(api_review_prs)} API review pull requests in {self.config.repository}",
        )
        self.config_store.save(configuration)
        print(f"\nReviewers configuration saved to: {self.config_store.config_path}")
        return configuration
