"""
Unit tests for the pull request data models
"""

from datetime import datetime, timezone

import pytest

from gapir.models import (PullRequest, PullRequestInfo, PullRequestStatistics,
                          ReviewerVote, parse_ado_date)


class TestParseAdoDate:
    """Test cases for Azure DevOps timestamp parsing."""

    def test_seven_fractional_digits(self):
        parsed = parse_ado_date('2025-08-30T16:17:03.1234567Z')
        assert parsed == datetime(2025, 8, 30, 16, 17, 3, 123456, tzinfo=timezone.utc)

    def test_without_fraction(self):
        assert parse_ado_date('2025-01-02T03:04:05Z') == datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    def test_short_fraction(self):
        assert parse_ado_date('2025-01-02T03:04:05.5Z').microsecond == 500000

    @pytest.mark.parametrize('value', [None, '', 'not a date'])
    def test_invalid_values(self, value):
        assert parse_ado_date(value) is None


class TestReviewerVote:
    """Test cases for reviewer payload parsing."""

    def test_from_api(self):
        reviewer = ReviewerVote.from_api({
            'id': 'abc-123',
            'displayName': 'Ada Lovelace',
            'uniqueName': 'ada@microsoft.com',
            'vote': 5,
            'isRequired': True,
        })
        assert reviewer.identifier == 'abc-123'
        assert reviewer.display_name == 'Ada Lovelace'
        assert reviewer.unique_name == 'ada@microsoft.com'
        assert reviewer.vote == 5
        assert reviewer.is_required is True
        assert reviewer.is_container is False

    def test_missing_is_required_means_not_required(self):
        """The API omits isRequired for reviewers that are not required."""
        reviewer = ReviewerVote.from_api({'id': 'x', 'vote': 10})
        assert reviewer.is_required is False

    def test_missing_or_invalid_vote_defaults_to_zero(self):
        assert ReviewerVote.from_api({'id': 'x'}).vote == 0
        assert ReviewerVote.from_api({'id': 'x', 'vote': 'n/a'}).vote == 0

    def test_group_reviewer(self):
        reviewer = ReviewerVote.from_api({'id': 'g', 'displayName': '[TEAM FOUNDATION]\\Reviewers', 'isContainer': True})
        assert reviewer.is_container is True

    def test_unknown_vote_value_is_kept(self):
        assert ReviewerVote.from_api({'id': 'x', 'vote': 7}).vote == 7


class TestPullRequest:
    """Test cases for pull request payload parsing."""

    def test_from_api(self):
        pr = PullRequest.from_api({
            'pullRequestId': 12041652,
            'title': 'Add beta endpoint',
            'status': 'active',
            'createdBy': {'id': 'author-id', 'displayName': 'Grace Hopper'},
            'creationDate': '2025-08-01T10:00:00Z',
            'reviewers': [{'id': 'r1', 'vote': 10, 'isRequired': True}],
        })
        assert pr.pull_request_id == 12041652
        assert pr.created_by_name == 'Grace Hopper'
        assert pr.created_by_id == 'author-id'
        assert pr.creation_date == datetime(2025, 8, 1, 10, 0, tzinfo=timezone.utc)
        assert len(pr.reviewers) == 1
        assert pr.is_completed is False

    def test_missing_reviewers_stays_none(self):
        pr = PullRequest.from_api({'pullRequestId': 1})
        assert pr.reviewers is None

    @pytest.mark.parametrize('status,completed', [
        ('active', False),
        ('completed', True),
        ('abandoned', True),
    ])
    def test_is_completed(self, status, completed):
        assert PullRequest(pull_request_id=1, status=status).is_completed is completed


class TestPullRequestInfo:
    """Test cases for enriched pull request information."""

    def test_to_dict(self):
        pr = PullRequest(pull_request_id=5, title='Fix paging', created_by_name='Alan',
                         creation_date=datetime(2025, 1, 1, tzinfo=timezone.utc))
        info = PullRequestInfo(pull_request=pr, my_vote_status='NoVote', api_approval_ratio='1/2',
                               pending_reason='PendRv', is_approved_by_me=False)
        data = info.to_dict()
        assert data['pullRequestId'] == 5
        assert data['title'] == 'Fix paging'
        assert data['authorName'] == 'Alan'
        assert data['myVoteStatus'] == 'NoVote'
        assert data['apiApprovalRatio'] == '1/2'
        assert data['creationDate'] == '2025-01-01T00:00:00+00:00'
        assert data['isApprovedByMe'] is False

    def test_statistics_to_dict(self):
        stats = PullRequestStatistics(total_assigned=3, pending_review=2, already_approved=1)
        assert stats.to_dict() == {'totalAssigned': 3, 'pendingReview': 2, 'alreadyApproved': 1}
