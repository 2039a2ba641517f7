"""Data models for Azure DevOps pull request review analysis."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional


def parse_ado_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an Azure DevOps timestamp (ISO 8601, trailing Z, up to 7 fractional digits)."""
    if not value:
        return None
    text = value.replace('Z', '+00:00')
    # Python only accepts microseconds, ADO sends 100ns ticks
    if '.' in text:
        head, _, tail = text.partition('.')
        digits = ''
        rest = ''
        for i, ch in enumerate(tail):
            if not ch.isdigit():
                rest = tail[i:]
                break
            digits += ch
        text = f"{head}.{digits[:6].ljust(6, '0')}{rest}"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class ReviewerVote:
    """One reviewer's recorded vote on a pull request."""
    identifier: str
    display_name: str = ''
    vote: int = 0
    is_required: bool = False
    unique_name: str = ''  # email or principal name, may be empty
    is_container: bool = False  # group assigned as reviewer

    @classmethod
    def from_api(cls, data: Dict) -> 'ReviewerVote':
        """Build from an Azure DevOps ``IdentityRefWithVote`` payload."""
        try:
            vote = int(data.get('vote') or 0)
        except (TypeError, ValueError):
            vote = 0
        return cls(
            identifier=str(data.get('id') or ''),
            display_name=data.get('displayName') or '',
            vote=vote,
            # isRequired is omitted by the API when false
            is_required=data.get('isRequired') is True,
            unique_name=data.get('uniqueName') or '',
            is_container=data.get('isContainer') is True,
        )


@dataclass(frozen=True)
class CurrentUser:
    """The authenticated user running the tool."""
    id: str
    display_name: str


@dataclass
class PullRequest:
    """Snapshot of an Azure DevOps pull request."""
    pull_request_id: int
    title: str = ''
    status: str = 'active'
    created_by_id: str = ''
    created_by_name: str = ''
    creation_date: Optional[datetime] = None
    reviewers: Optional[List[ReviewerVote]] = None
    url: str = ''

    @property
    def is_completed(self) -> bool:
        """True when the PR is no longer active (completed or abandoned)."""
        return (self.status or '').lower() != 'active'

    @classmethod
    def from_api(cls, data: Dict) -> 'PullRequest':
        """Build from an Azure DevOps ``GitPullRequest`` payload."""
        created_by = data.get('createdBy') or {}
        reviewers = data.get('reviewers')
        return cls(
            pull_request_id=int(data['pullRequestId']),
            title=data.get('title') or '',
            status=data.get('status') or 'active',
            created_by_id=str(created_by.get('id') or ''),
            created_by_name=created_by.get('displayName') or '',
            creation_date=parse_ado_date(data.get('creationDate')),
            reviewers=[ReviewerVote.from_api(r) for r in reviewers] if reviewers is not None else None,
            url=data.get('url') or '',
        )


@dataclass
class PullRequestInfo:
    """A pull request enriched with the values shown in the console tables."""
    pull_request: PullRequest
    my_vote_status: str = ''
    api_approval_ratio: str = ''
    time_assigned: str = ''
    last_change_info: str = ''
    pending_reason: str = ''
    is_approved_by_me: bool = False

    @property
    def pull_request_id(self) -> int:
        return self.pull_request.pull_request_id

    @property
    def title(self) -> str:
        return self.pull_request.title

    @property
    def author_name(self) -> str:
        return self.pull_request.created_by_name

    @property
    def is_completed(self) -> bool:
        return self.pull_request.is_completed

    def to_dict(self) -> Dict:
        """Serialize for JSON output (camelCase keys)."""
        created = self.pull_request.creation_date
        return {
            'pullRequestId': self.pull_request_id,
            'title': self.title,
            'authorName': self.author_name,
            'creationDate': created.isoformat() if created else None,
            'myVoteStatus': self.my_vote_status,
            'apiApprovalRatio': self.api_approval_ratio,
            'timeAssigned': self.time_assigned,
            'lastChangeInfo': self.last_change_info,
            'pendingReason': self.pending_reason,
            'isApprovedByMe': self.is_approved_by_me,
        }


@dataclass
class PullRequestStatistics:
    """Counts over all pull requests assigned to the current user."""
    total_assigned: int = 0
    pending_review: int = 0
    already_approved: int = 0

    def to_dict(self) -> Dict:
        return {
            'totalAssigned': self.total_assigned,
            'pendingReview': self.pending_review,
            'alreadyApproved': self.already_approved,
        }


@dataclass
class AnalysisResult:
    """Outcome of one analysis run."""
    current_user: CurrentUser
    pull_requests: List[PullRequestInfo] = field(default_factory=list)
    error_message: Optional[str] = None


@dataclass
class PullRequestDiagnosis:
    """Raw reviewer data of one pull request and how it was classified for the current user."""
    pull_request: PullRequest
    current_user: CurrentUser
    my_entry: Optional[ReviewerVote] = None
    my_vote_status: str = ''
    api_approval_ratio: str = ''
    api_reviewer_ids: List[str] = field(default_factory=list)
