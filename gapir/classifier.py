"""Reviewer vote classification for pull requests.

Every value shown in the Status, Ratio and Why columns comes from here. The
functions are total: malformed reviewer data maps to a defined result so one
odd pull request never aborts rendering a whole batch.

Azure DevOps keeps a reviewer that was unassigned from a pull request in the
reviewer list with ``isRequired`` set to false. Such entries are ignored for
every count and for the current user's status.
"""

from typing import Iterable, List, Optional

from .models import CurrentUser, PullRequest, ReviewerVote


VOTE_APPROVED = 10
VOTE_APPROVED_WITH_SUGGESTIONS = 5
VOTE_NO_VOTE = 0
VOTE_WAITING_FOR_AUTHOR = -5
VOTE_REJECTED = -10

VOTE_CODES = {
    VOTE_APPROVED: 'Apprvd',
    VOTE_APPROVED_WITH_SUGGESTIONS: 'Sugges',
    VOTE_NO_VOTE: 'NoVote',
    VOTE_WAITING_FOR_AUTHOR: 'Wait4A',
    VOTE_REJECTED: 'Reject',
}
UNKNOWN_VOTE_CODE = 'Unknow'
NOT_A_REVIEWER = '---'

VOTE_DESCRIPTIONS = {
    VOTE_APPROVED: 'Approved',
    VOTE_APPROVED_WITH_SUGGESTIONS: 'Approved with suggestions',
    VOTE_NO_VOTE: 'No vote',
    VOTE_WAITING_FOR_AUTHOR: 'Waiting for author',
    VOTE_REJECTED: 'Rejected',
}

# Minimum number of API reviewer approvals the branch policy asks for
REQUIRED_API_APPROVALS = 2

_NON_HUMAN_PREFIX = '[TEAM FOUNDATION]'
_NON_HUMAN_NAMES = ('ownership enforcer',)
_NON_HUMAN_MARKERS = ('bot', 'automation')


def vote_code(vote: int) -> str:
    """Map a vote value to its six character mnemonic."""
    return VOTE_CODES.get(vote, UNKNOWN_VOTE_CODE)


def vote_description(vote: int) -> str:
    return VOTE_DESCRIPTIONS.get(vote, 'Unknown')


def is_known_vote(vote: int) -> bool:
    return vote in VOTE_CODES


def is_affirmative(vote: int) -> bool:
    """Approved or approved with suggestions."""
    return vote >= VOTE_APPROVED_WITH_SUGGESTIONS


def is_human_reviewer(reviewer: ReviewerVote) -> bool:
    """False for groups, the ownership enforcer and bot or automation accounts."""
    name = reviewer.display_name or ''
    lowered = name.lower()
    if name.startswith(_NON_HUMAN_PREFIX) or lowered in _NON_HUMAN_NAMES:
        return False
    return not any(marker in lowered for marker in _NON_HUMAN_MARKERS)


class ReviewerClassifier:
    """Classifies a pull request's reviewers for one user and one reviewer group."""

    def __init__(self, api_reviewers: Iterable[str], current_user: CurrentUser,
                 match_display_name: bool = True):
        """Initialize the classifier.

        Args:
            api_reviewers: Identifiers (emails or account ids) of the API reviewers group
            current_user: The user whose vote status is reported
            match_display_name: Also resolve the current user by display name when the id does not match
        """
        self.api_reviewers: frozenset = frozenset(
            m.strip().lower() for m in (api_reviewers or ()) if m and m.strip()
        )
        self.current_user = current_user
        self.match_display_name = match_display_name

    def is_api_reviewer(self, reviewer: ReviewerVote) -> bool:
        """Check group membership by account id or by email, ignoring case."""
        keys = (reviewer.identifier, reviewer.unique_name)
        return any(k and k.lower() in self.api_reviewers for k in keys)

    def find_current_user(self, pr: PullRequest) -> Optional[ReviewerVote]:
        """Return the current user's reviewer entry, or None."""
        user_id = (self.current_user.id or '').lower()
        user_name = (self.current_user.display_name or '').lower()
        for reviewer in pr.reviewers or ():
            if user_id and reviewer.identifier.lower() == user_id:
                return reviewer
            if self.match_display_name and user_name and reviewer.display_name.lower() == user_name:
                return reviewer
        return None

    def required_api_reviewers(self, pr: PullRequest) -> List[ReviewerVote]:
        return [r for r in pr.reviewers or () if r.is_required and self.is_api_reviewer(r)]

    def api_approval_ratio(self, pr: PullRequest) -> str:
        """Approved/total among required members of the API reviewers group.

        Approved with suggestions counts as approved here. Returns "0/0" when
        no required API reviewer is assigned.
        """
        reviewers = self.required_api_reviewers(pr)
        approved = sum(1 for r in reviewers if is_affirmative(r.vote))
        return f"{approved}/{len(reviewers)}"

    def my_vote_status(self, pr: PullRequest) -> str:
        """The current user's vote code, or "---" when not an active reviewer."""
        me = self.find_current_user(pr)
        if me is None or not me.is_required:
            return NOT_A_REVIEWER
        return vote_code(me.vote)

    def is_approved_by_current_user(self, pr: PullRequest) -> bool:
        """True only for a required reviewer entry with a plain approval (10)."""
        me = self.find_current_user(pr)
        return me is not None and me.is_required and me.vote == VOTE_APPROVED

    def pending_reason(self, pr: PullRequest) -> str:
        """Why a pull request is not completed yet.

        Rejections and waiting-for-author votes from any reviewer win, then
        missing API reviewer approvals, then missing approvals from other
        human reviewers. Anything left is attributed to build or branch
        policies.
        """
        reviewers = [r for r in pr.reviewers or () if r.is_required]

        if any(r.vote == VOTE_REJECTED for r in reviewers):
            return 'Reject'
        if any(r.vote == VOTE_WAITING_FOR_AUTHOR for r in reviewers):
            return 'Wait4A'

        api_reviewers = [r for r in reviewers if self.is_api_reviewer(r)]
        others = [r for r in reviewers if not self.is_api_reviewer(r) and is_human_reviewer(r)]

        api_approved = sum(1 for r in api_reviewers if is_affirmative(r.vote))
        others_approved = sum(1 for r in others if is_affirmative(r.vote))

        if api_reviewers and api_approved < REQUIRED_API_APPROVALS:
            return 'PendRv'
        if api_approved >= REQUIRED_API_APPROVALS and others and others_approved < len(others):
            return 'PendOt'
        return 'Policy'
