"""Resolution of the API reviewers group membership."""

import logging
from typing import Dict, Set

import requests

from .api_client import AzureDevOpsAuthError, AzureDevOpsClient
from .reviewers_config import ReviewersConfigStore

GROUP_DESCRIPTOR_PREFIX = 'vssgp.'


def _is_group(identity: Dict) -> bool:
    if identity.get('isContainer'):
        return True
    descriptor = identity.get('subjectDescriptor') or ''
    return descriptor.startswith(GROUP_DESCRIPTOR_PREFIX)


def _identity_keys(identity: Dict) -> Set[str]:
    """Account id plus mail / account name, whichever the identity carries."""
    keys = set()
    if identity.get('id'):
        keys.add(str(identity['id']).lower())
    properties = identity.get('properties') or {}
    for prop in ('Mail', 'Account'):
        value = (properties.get(prop) or {}).get('$value')
        if value and '@' in value:
            keys.add(value.lower())
    return keys


class ApiReviewersGroupService:
    """Finds the members of the API reviewers group, expanding nested groups."""

    def __init__(self, api_client: AzureDevOpsClient, group_name: str,
                 config_store: ReviewersConfigStore = None):
        self.api_client = api_client
        self.group_name = group_name
        self.config_store = config_store or ReviewersConfigStore()

    def get_group_members(self) -> Set[str]:
        """Return member identifiers, or the configured fallback list.

        Lookup failures fall back to the configured list, except rejected
        credentials which propagate as ``AzureDevOpsAuthError``.
        """
        try:
            logging.info(f"Fetching API reviewers group: {self.group_name}")
            candidates = self.api_client.search_identities(self.group_name)
            group = next(
                (i for i in candidates
                 if (i.get('providerDisplayName') or '').lower() == self.group_name.lower()),
                None
            )

            if group is not None:
                logging.info(f"Found group: {group.get('providerDisplayName')}, Id: {group.get('id')}")
                members = self.expand_members(group['id'])
                logging.info(f"Found {len(members)} API reviewers via group membership")
            else:
                logging.warning(f"Group '{self.group_name}' not found")
                members = set()
        except AzureDevOpsAuthError:
            raise
        except (requests.RequestException, KeyError, ValueError) as e:
            logging.error(f"Error fetching API reviewers: {e}")
            members = set()

        if not members:
            logging.warning("No API reviewers found via group membership, using static fallback")
            members = self.fallback_members()

        return members

    def fallback_members(self) -> Set[str]:
        return self.config_store.load().email_addresses()

    def expand_members(self, group_id: str) -> Set[str]:
        """Collect user identifiers of a group and all groups nested in it."""
        members: Set[str] = set()
        self._expand(group_id, members, set())
        return members

    def _expand(self, group_id: str, members: Set[str], processed: Set[str]):
        if group_id in processed:
            return
        processed.add(group_id)

        try:
            group = self.api_client.read_identity(group_id, expand_members=True)
        except AzureDevOpsAuthError:
            raise
        except requests.RequestException as e:
            logging.debug(f"Error expanding group {group_id}: {e}")
            return

        for member_id in (group or {}).get('memberIds') or []:
            try:
                member = self.api_client.read_identity(member_id)
            except requests.RequestException as e:
                logging.debug(f"Could not read member {member_id}, treating as user: {e}")
                members.add(str(member_id).lower())
                continue

            if member and _is_group(member):
                logging.debug(f"Found nested group: {member.get('providerDisplayName')}, expanding...")
                self._expand(member_id, members, processed)
            elif member:
                members.update(_identity_keys(member))
                logging.debug(f"Added user: {member.get('providerDisplayName')} ({member_id})")
            else:
                members.add(str(member_id).lower())
