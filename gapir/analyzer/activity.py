"""Age and last-change enrichment methods for PullRequestAnalyzer."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import requests

from ..models import PullRequest, parse_ado_date

THREAD_STATUS_CHANGES = {
    'active': 'Added Comment',
    'fixed': 'Resolved Comment',
    'wontfix': "Won't Fix Comment",
    'closed': 'Closed Comment',
}

VOTE_CHANGES = {
    -10: 'Rejected',
    -5: 'Waiting for Author',
    5: 'Approved with Suggestions',
    10: 'Approved',
}


def format_time_difference(delta: timedelta) -> str:
    """Compact age used in the Age column: 3d, 5h, 12m or < 1m."""
    seconds = delta.total_seconds()
    if seconds >= 86400:
        return f"{int(seconds // 86400)}d"
    if seconds >= 3600:
        return f"{int(seconds // 3600)}h"
    if seconds >= 60:
        return f"{int(seconds // 60)}m"
    return "< 1m"


def _time_assigned(self, pr: PullRequest, now: Optional[datetime] = None) -> str:
    """Time since the PR was created.

    The pull request payload carries no reviewer assignment timestamp, so
    creation time is used.
    """
    if pr.creation_date is None:
        return "Unknown"
    now = now or datetime.now(timezone.utc)
    return f"{format_time_difference(now - pr.creation_date)} ago"


def _latest_comment(threads: List[Dict]):
    """Return (date, author id, change type) of the most recently updated comment."""
    latest = None
    for thread in threads:
        for comment in thread.get('comments') or []:
            updated = parse_ado_date(comment.get('lastUpdatedDate') or comment.get('publishedDate'))
            if updated is None:
                continue
            if latest is None or updated > latest[0]:
                status = (thread.get('status') or '').lower()
                change = THREAD_STATUS_CHANGES.get(status, 'Added Comment')
                latest = (updated, str((comment.get('author') or {}).get('id') or ''), change)
    return latest


def _last_change_info(self, pr: PullRequest) -> str:
    """Describe the most recent activity as "<Actor>: <Change>"."""
    latest_date = None
    author_id = ''
    change = 'Created PR'

    try:
        threads = self.api_client.get_threads(self.repository_id, pr.pull_request_id)
        comment = _latest_comment(threads)
        if comment is not None:
            latest_date, author_id, change = comment
    except requests.RequestException as e:
        logging.debug(f"Could not fetch threads for PR #{pr.pull_request_id}: {e}")

    try:
        iterations = self.api_client.get_iterations(self.repository_id, pr.pull_request_id)
        pushed = [d for d in (parse_ado_date(i.get('createdDate')) for i in iterations) if d]
        if pushed:
            last_push = max(pushed)
            if latest_date is None or last_push > latest_date:
                latest_date = last_push
                author_id = pr.created_by_id
                change = 'Pushed Code'
    except requests.RequestException as e:
        # iterations need extra permissions on some projects
        logging.debug(f"Could not fetch iterations for PR #{pr.pull_request_id}: {e}")

    # A vote by the same person is more telling than their comment
    for reviewer in pr.reviewers or ():
        if reviewer.vote != 0 and author_id and reviewer.identifier.lower() == author_id.lower():
            change = VOTE_CHANGES.get(reviewer.vote, 'Voted')
            break

    if not author_id:
        author_id = pr.created_by_id
        change = 'Created PR'

    if author_id and author_id.lower() == (self.current_user.id or '').lower():
        actor = 'Me'
    elif author_id.lower() == (pr.created_by_id or '').lower():
        actor = 'Author'
    elif any(r.identifier.lower() == author_id.lower() for r in pr.reviewers or ()):
        actor = 'Reviewer'
    else:
        actor = 'Other'

    return f"{actor}: {change}"
