"""Pull request processing methods for PullRequestAnalyzer."""

import logging
from typing import Dict, List
from concurrent.futures import ThreadPoolExecutor, as_completed

from ..classifier import is_known_vote
from ..models import PullRequest, PullRequestInfo


def analyze_pull_request(self, pr: PullRequest) -> PullRequestInfo:
    """Classify one pull request and collect its display values."""
    for reviewer in pr.reviewers or ():
        if not is_known_vote(reviewer.vote):
            logging.debug(f"PR #{pr.pull_request_id}: unexpected vote {reviewer.vote} from {reviewer.display_name}")

    info = PullRequestInfo(
        pull_request=pr,
        is_approved_by_me=self.classifier.is_approved_by_current_user(pr),
        my_vote_status=self.classifier.my_vote_status(pr),
        api_approval_ratio=self.classifier.api_approval_ratio(pr),
        pending_reason=self.classifier.pending_reason(pr),
        time_assigned=self._time_assigned(pr),
    )

    if self.include_last_change:
        info.last_change_info = self._last_change_info(pr)

    return info


def _analyze_parallel(self, raw_prs: List[Dict]) -> List[PullRequestInfo]:
    """Analyze PRs in parallel, keeping the order Azure DevOps returned them in.

    Args:
        raw_prs: Pull request payloads from the Azure DevOps API

    Returns:
        One PullRequestInfo per PR that could be analyzed
    """
    if not raw_prs:
        return []

    results: Dict[int, PullRequestInfo] = {}
    max_workers = min(10, len(raw_prs))

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_index = {}
        for index, data in enumerate(raw_prs):
            try:
                pr = PullRequest.from_api(data)
            except (KeyError, TypeError, ValueError) as e:
                logging.error(f"Skipping malformed pull request payload: {e}")
                continue
            future_to_index[executor.submit(self.analyze_pull_request, pr)] = (index, pr)

        for future in as_completed(future_to_index):
            index, pr = future_to_index[future]
            try:
                results[index] = future.result()
            except Exception as e:
                logging.error(f"Error analyzing PR #{pr.pull_request_id}: {e}", exc_info=True)

    return [results[i] for i in sorted(results)]
