"""
Unit tests for API reviewers group resolution
"""

from unittest.mock import Mock

import pytest
import requests

from gapir.api_client import AzureDevOpsAuthError
from gapir.group_service import ApiReviewersGroupService
from gapir.reviewers_config import ApiReviewer, ReviewersConfiguration

GROUP_NAME = '[TEAM FOUNDATION]\\Microsoft Graph API reviewers'


def user(identity_id, mail=None):
    identity = {'id': identity_id, 'providerDisplayName': identity_id, 'isContainer': False}
    if mail:
        identity['properties'] = {'Mail': {'$type': 'System.String', '$value': mail}}
    return identity


def group(identity_id, member_ids=()):
    return {'id': identity_id, 'providerDisplayName': identity_id, 'isContainer': True,
            'memberIds': list(member_ids)}


@pytest.fixture
def config_store():
    store = Mock()
    store.load.return_value = ReviewersConfiguration(
        reviewers=[ApiReviewer('fallback@microsoft.com', 'Fallback')]
    )
    return store


@pytest.fixture
def api_client():
    return Mock()


@pytest.fixture
def service(api_client, config_store):
    return ApiReviewersGroupService(api_client, GROUP_NAME, config_store)


def install_directory(api_client, identities):
    """Serve read_identity calls from a dict of identities."""
    def read_identity(identity_id, expand_members=False):
        return identities.get(identity_id)
    api_client.read_identity.side_effect = read_identity


class TestGroupExpansion:
    """Test cases for recursive member expansion."""

    def test_users_and_nested_groups(self, service, api_client):
        install_directory(api_client, {
            'root': group('root', ['u1', 'nested']),
            'nested': group('nested', ['u2', 'root']),
            'u1': user('u1', 'Ada@Microsoft.com'),
            'u2': user('u2'),
        })

        members = service.expand_members('root')

        assert members == {'u1', 'ada@microsoft.com', 'u2'}

    def test_group_detected_by_descriptor(self, service, api_client):
        install_directory(api_client, {
            'root': group('root', ['legacy']),
            'legacy': {'id': 'legacy', 'subjectDescriptor': 'vssgp.Uy0xLTk', 'memberIds': ['u1']},
            'u1': user('u1'),
        })

        assert service.expand_members('root') == {'u1'}

    def test_unreadable_member_is_treated_as_user(self, service, api_client):
        def read_identity(identity_id, expand_members=False):
            if identity_id == 'root':
                return group('root', ['U-9'])
            raise requests.exceptions.HTTPError("403")
        api_client.read_identity.side_effect = read_identity

        assert service.expand_members('root') == {'u-9'}

    def test_auth_error_while_expanding_propagates(self, service, api_client):
        api_client.read_identity.side_effect = AzureDevOpsAuthError("401")

        with pytest.raises(AzureDevOpsAuthError):
            service.expand_members('root')

    def test_unreadable_group_is_skipped(self, service, api_client):
        api_client.read_identity.side_effect = requests.exceptions.ConnectionError("down")
        assert service.expand_members('root') == set()


class TestGetGroupMembers:
    """Test cases for group lookup with fallback."""

    def test_group_found(self, service, api_client, config_store):
        api_client.search_identities.return_value = [
            {'id': 'other', 'providerDisplayName': 'Something else'},
            {'id': 'root', 'providerDisplayName': GROUP_NAME.upper()},
        ]
        install_directory(api_client, {'root': group('root', ['u1']), 'u1': user('u1')})

        assert service.get_group_members() == {'u1'}
        config_store.load.assert_not_called()

    def test_group_not_found_uses_fallback(self, service, api_client):
        api_client.search_identities.return_value = []
        assert service.get_group_members() == {'fallback@microsoft.com'}

    def test_empty_group_uses_fallback(self, service, api_client):
        api_client.search_identities.return_value = [{'id': 'root', 'providerDisplayName': GROUP_NAME}]
        install_directory(api_client, {'root': group('root')})

        assert service.get_group_members() == {'fallback@microsoft.com'}

    def test_auth_error_propagates(self, service, api_client, config_store):
        api_client.search_identities.side_effect = AzureDevOpsAuthError("401")

        with pytest.raises(AzureDevOpsAuthError):
            service.get_group_members()
        config_store.load.assert_not_called()

    def test_lookup_error_uses_fallback(self, service, api_client):
        api_client.search_identities.side_effect = requests.exceptions.HTTPError("500")
        assert service.get_group_members() == {'fallback@microsoft.com'}
