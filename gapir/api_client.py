"""Azure DevOps REST client for pull requests and identities."""

import os
import logging
from base64 import b64encode
from typing import Dict, List, Optional
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

API_VERSION = '7.1'


class AzureDevOpsAuthError(requests.HTTPError):
    """Raised when Azure DevOps rejects the credentials."""


def identities_base_url(organization_url: str) -> str:
    """Identity lookups live on the vssps host of the organization.

    https://dev.azure.com/org -> https://vssps.dev.azure.com/org
    https://org.visualstudio.com -> https://org.vssps.visualstudio.com
    """
    parsed = urlparse(organization_url)
    host = parsed.netloc
    if host == 'dev.azure.com':
        return f"{parsed.scheme}://vssps.dev.azure.com{parsed.path.rstrip('/')}"
    if host.endswith('.visualstudio.com'):
        org = host.split('.')[0]
        return f"{parsed.scheme}://{org}.vssps.visualstudio.com"
    return organization_url.rstrip('/')


class AzureDevOpsClient:
    """Handles Azure DevOps API requests with retry logic and pagination."""

    def __init__(self, organization_url: str, project: str, token: str = None):
        """Initialize the Azure DevOps API client.

        Args:
            organization_url: e.g. https://dev.azure.com/msazure
            project: Project name
            token: Personal access token with Code (read) and Identity (read) scopes
        """
        self.organization_url = organization_url.rstrip('/')
        self.project = project
        self.token = token or os.environ.get('AZURE_DEVOPS_PAT')
        self.session = requests.Session()

        adapter = HTTPAdapter(
            pool_connections=20,
            pool_maxsize=20,
            max_retries=Retry(
                total=3,
                backoff_factor=0.3,
                status_forcelist=[500, 502, 503, 504]
            )
        )
        self.session.mount('https://', adapter)
        self.session.mount('http://', adapter)
        self.session.headers.update({'Accept': 'application/json'})

        if self.token:
            encoded = b64encode(f":{self.token}".encode()).decode()
            self.session.headers.update({'Authorization': f'Basic {encoded}'})
            logging.info("Initialized Azure DevOps API client with personal access token")
        else:
            logging.warning("No Azure DevOps token provided, requests will most likely be rejected.")
            logging.warning("Set AZURE_DEVOPS_PAT environment variable or pass token as argument.")

    @property
    def git_url(self) -> str:
        return f"{self.organization_url}/{self.project}/_apis/git"

    def get_json(self, url: str, params: Dict = None) -> Dict:
        """Make a single GET request and return the decoded JSON body.

        Raises:
            AzureDevOpsAuthError: On 401/203 (Azure DevOps answers 203 with a sign-in page)
            requests.HTTPError: On any other error status
        """
        params = dict(params or {})
        params.setdefault('api-version', API_VERSION)
        logging.debug(f"GET {url} {params}")
        response = self.session.get(url, params=params)

        if response.status_code in (401, 203):
            logging.error(f"Authentication failed for {url} (HTTP {response.status_code})")
            raise AzureDevOpsAuthError(f"Azure DevOps rejected the credentials (HTTP {response.status_code})")

        response.raise_for_status()
        return response.json()

    def get_paginated(self, url: str, params: Dict = None, page_size: int = 100,
                      limit: Optional[int] = None) -> List[Dict]:
        """Fetch all pages of a ``$top``/``$skip`` paginated list endpoint.

        Args:
            url: The API endpoint URL
            params: Query parameters
            page_size: Items requested per page
            limit: Stop after this many items

        Returns:
            List of all items from all pages
        """
        results = []
        skip = 0
        params = dict(params or {})

        while True:
            top = page_size if limit is None else min(page_size, limit - len(results))
            if top <= 0:
                break
            params['$top'] = top
            params['$skip'] = skip
            data = self.get_json(url, params).get('value', [])

            if not data:
                break

            results.extend(data)

            if len(data) < top:
                break

            skip += len(data)

        logging.debug(f"Fetched {len(results)} total items from {url}")
        return results

    def get_connection_data(self) -> Dict:
        """Return the authenticated user as reported by ``connectionData``."""
        data = self.get_json(f"{self.organization_url}/_apis/connectionData",
                             {'api-version': f'{API_VERSION}-preview'})
        return data.get('authenticatedUser', {})

    def get_repository(self, repository: str) -> Dict:
        return self.get_json(f"{self.git_url}/repositories/{repository}")

    def get_pull_requests(self, repository_id: str, status: str = 'active',
                          reviewer_id: str = None, limit: Optional[int] = None) -> List[Dict]:
        """List pull requests of a repository, optionally only those with a given reviewer."""
        params = {'searchCriteria.status': status}
        if reviewer_id:
            params['searchCriteria.reviewerId'] = reviewer_id
        return self.get_paginated(f"{self.git_url}/repositories/{repository_id}/pullrequests",
                                  params, limit=limit)

    def get_pull_request(self, repository_id: str, pull_request_id: int) -> Dict:
        return self.get_json(f"{self.git_url}/repositories/{repository_id}/pullrequests/{pull_request_id}")

    def get_threads(self, repository_id: str, pull_request_id: int) -> List[Dict]:
        url = f"{self.git_url}/repositories/{repository_id}/pullRequests/{pull_request_id}/threads"
        return self.get_json(url).get('value', [])

    def get_iterations(self, repository_id: str, pull_request_id: int) -> List[Dict]:
        url = f"{self.git_url}/repositories/{repository_id}/pullRequests/{pull_request_id}/iterations"
        return self.get_json(url).get('value', [])

    def search_identities(self, filter_value: str) -> List[Dict]:
        """Find identities (users or groups) by display name."""
        url = f"{identities_base_url(self.organization_url)}/_apis/identities"
        return self.get_json(url, {
            'searchFilter': 'General',
            'filterValue': filter_value,
            'queryMembership': 'None',
        }).get('value', [])

    def read_identity(self, identity_id: str, expand_members: bool = False) -> Optional[Dict]:
        """Read one identity by id, with its direct members when ``expand_members`` is set."""
        url = f"{identities_base_url(self.organization_url)}/_apis/identities"
        identities = self.get_json(url, {
            'identityIds': identity_id,
            'queryMembership': 'Direct' if expand_members else 'None',
        }).get('value', [])
        return identities[0] if identities else None
