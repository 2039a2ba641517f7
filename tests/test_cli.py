"""
Unit tests for the gapir command line
"""

import logging
from unittest.mock import patch

import pytest

from gapir import cli
from gapir.api_client import AzureDevOpsAuthError, AzureDevOpsClient
from gapir.group_service import ApiReviewersGroupService
from gapir.models import AnalysisResult, CurrentUser


@pytest.fixture(autouse=True)
def azure_env(monkeypatch):
    monkeypatch.setenv('AZURE_DEVOPS_ORG_URL', 'https://dev.azure.com/contoso/')
    monkeypatch.setenv('AZURE_DEVOPS_PROJECT', 'One')
    monkeypatch.setenv('AZURE_DEVOPS_REPOSITORY', 'Repo')
    monkeypatch.setenv('AZURE_DEVOPS_PAT', 'test_token')


class TestParser:
    """Test cases for argument parsing."""

    def test_defaults(self):
        args = cli.build_parser().parse_args(['review'])
        assert args.command == 'review'
        assert not args.output_json
        assert args.short_urls
        assert not args.detailed_timing
        assert not args.show_detailed_info
        assert args.show_statistics
        assert args.match_display_name

    def test_approved_flags(self):
        args = cli.build_parser().parse_args(['approved', '--json', '--detailed-timing', '--id-only'])
        assert args.output_json
        assert args.detailed_timing
        assert not args.match_display_name

    def test_review_flags(self):
        args = cli.build_parser().parse_args(['review', '-f', '-t', '-d'])
        assert not args.short_urls
        assert args.detailed_timing
        assert args.show_detailed_info

    def test_diagnose(self):
        args = cli.build_parser().parse_args(['diagnose', '12041652'])
        assert args.command == 'diagnose'
        assert args.id == '12041652'
        assert args.match_display_name

    def test_no_command(self):
        args = cli.build_parser().parse_args([])
        assert args.command is None


class TestUrlCommand:
    """Test cases for turning ids into pull request URLs."""

    def test_base62_id(self, capsys):
        assert cli.main(['url', 'OwAc']) == 0
        assert capsys.readouterr().out.strip() == \
            'https://dev.azure.com/contoso/One/_git/Repo/pullrequest/12041652'

    def test_decimal_id_short(self, capsys):
        assert cli.main(['url', '12041652', '--short']) == 0
        assert capsys.readouterr().out.strip() == 'http://g/pr/OwAc'

    def test_invalid_id(self, capsys):
        assert cli.main(['url', 'not-an-id']) == 1
        assert 'Invalid pull request id' in capsys.readouterr().err


class TestReviewCommand:
    """Test cases for the review and approved commands."""

    def result(self, error_message=None):
        return AnalysisResult(current_user=CurrentUser(id='me', display_name='Test User'),
                              error_message=error_message)

    @patch('gapir.cli.PullRequestAnalyzer')
    def test_review_is_default(self, mock_analyzer, capsys):
        mock_analyzer.return_value.load_pull_requests.return_value = self.result()

        assert cli.main([]) == 0

        assert mock_analyzer.call_args[0][1] == 'test_token'
        assert 'Pending Review' in capsys.readouterr().out

    @patch('gapir.cli.PullRequestAnalyzer')
    def test_approved(self, mock_analyzer, capsys):
        mock_analyzer.return_value.load_pull_requests.return_value = self.result()

        assert cli.main(['approved', '--id-only']) == 0

        assert mock_analyzer.call_args[1]['match_display_name'] is False
        assert 'Already Approved' in capsys.readouterr().out

    @patch('gapir.cli.PullRequestAnalyzer')
    def test_error_sets_exit_code(self, mock_analyzer):
        mock_analyzer.return_value.load_pull_requests.return_value = self.result('boom')
        assert cli.main(['review']) == 1

    @patch.object(AzureDevOpsClient, 'get_connection_data',
                  side_effect=AzureDevOpsAuthError("Azure DevOps rejected the credentials (HTTP 401)"))
    def test_auth_error(self, mock_connection, caplog, capsys):
        with caplog.at_level(logging.ERROR):
            assert cli.main(['review']) == 1

        assert any('Authentication failed' in r.getMessage() for r in caplog.records)
        assert 'Error occurred while checking pull requests' not in caplog.text
        assert 'Pending Review' not in capsys.readouterr().out

    @patch('builtins.input', return_value='')
    def test_missing_token_exits(self, mock_input, monkeypatch):
        monkeypatch.delenv('AZURE_DEVOPS_PAT')
        with pytest.raises(SystemExit) as exc:
            cli.get_token()
        assert exc.value.code == 1


PULL_REQUEST = {
    'pullRequestId': 12041652,
    'title': 'Add beta endpoint',
    'status': 'active',
    'createdBy': {'id': 'author-id', 'displayName': 'Pat Author'},
    'creationDate': '2025-08-01T10:00:00.1234567Z',
    'reviewers': [
        {'id': 'group-id', 'displayName': '[TEAM FOUNDATION]\\Microsoft Graph API reviewers',
         'uniqueName': 'vstfs:///Classification/TeamProject/abc', 'vote': 0, 'isRequired': True,
         'isContainer': True},
        {'id': 'me-id', 'displayName': 'Test User', 'uniqueName': 'me@microsoft.com', 'vote': -5,
         'isRequired': True},
        {'id': 'api1-id', 'displayName': 'Ada Lovelace', 'uniqueName': 'api1@microsoft.com', 'vote': 10,
         'isRequired': True},
    ],
}


@pytest.fixture
def azure_devops():
    """Patch the client calls the diagnose command makes."""
    with patch.object(AzureDevOpsClient, 'get_connection_data') as connection, \
            patch.object(AzureDevOpsClient, 'get_repository', return_value={'id': 'repo-id'}), \
            patch.object(AzureDevOpsClient, 'get_pull_request', return_value=PULL_REQUEST) as get_pr, \
            patch.object(ApiReviewersGroupService, 'get_group_members', return_value={'api1@microsoft.com'}):
        connection.return_value = {'id': 'me-id', 'providerDisplayName': 'Test User'}
        yield connection, get_pr


class TestDiagnoseCommand:
    """Test cases for printing the raw reviewer data of one pull request."""

    def test_reviewer_details(self, azure_devops, capsys):
        connection, get_pr = azure_devops

        assert cli.main(['diagnose', 'OwAc']) == 0

        get_pr.assert_called_once_with('repo-id', 12041652)
        out = capsys.readouterr().out
        assert 'Investigating PR 12041652 reviewer details...' in out
        assert 'Total Reviewers Count: 3' in out
        assert 'Reviewer: Ada Lovelace' in out
        assert '  - Unique Name: api1@microsoft.com' in out
        assert '  - Vote: 10 (Approved)' in out
        assert '  - IsContainer: True' in out
        assert 'Found in reviewers list: YES' in out
        assert 'Your Vote: -5 (Waiting for author)' in out
        assert 'Status: Wait4A' in out
        assert 'API Approval Ratio: 1/1' in out

    def test_current_user_not_found(self, azure_devops, capsys):
        connection, _ = azure_devops
        connection.return_value = {'id': 'someone-else', 'providerDisplayName': 'Someone Else'}

        assert cli.main(['diagnose', '12041652']) == 0

        out = capsys.readouterr().out
        assert 'YOUR REVIEWER STATUS: NOT FOUND in reviewers list' in out
        assert 'Status: ---' in out

    def test_invalid_id(self, capsys):
        assert cli.main(['diagnose', 'not-an-id']) == 1
        assert 'Invalid pull request id' in capsys.readouterr().err
