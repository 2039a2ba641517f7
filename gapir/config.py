"""Azure DevOps connection settings."""

import os
from dataclasses import dataclass

DEFAULT_ORGANIZATION_URL = 'https://dev.azure.com/msazure'
DEFAULT_PROJECT = 'One'
DEFAULT_REPOSITORY = 'AD-AggregatorService-Workloads'
DEFAULT_REVIEWERS_GROUP = '[TEAM FOUNDATION]\\Microsoft Graph API reviewers'
SHORT_URL_BASE = 'http://g/pr/'


@dataclass(frozen=True)
class AzureDevOpsConfiguration:
    """Organization, project, repository and reviewers group to check."""
    organization_url: str = DEFAULT_ORGANIZATION_URL
    project: str = DEFAULT_PROJECT
    repository: str = DEFAULT_REPOSITORY
    reviewers_group: str = DEFAULT_REVIEWERS_GROUP

    @classmethod
    def from_env(cls) -> 'AzureDevOpsConfiguration':
        """Read settings from the environment, falling back to the defaults."""
        return cls(
            organization_url=os.environ.get('AZURE_DEVOPS_ORG_URL', DEFAULT_ORGANIZATION_URL).rstrip('/'),
            project=os.environ.get('AZURE_DEVOPS_PROJECT', DEFAULT_PROJECT),
            repository=os.environ.get('AZURE_DEVOPS_REPOSITORY', DEFAULT_REPOSITORY),
            reviewers_group=os.environ.get('AZURE_DEVOPS_REVIEWERS_GROUP', DEFAULT_REVIEWERS_GROUP),
        )

    def pull_request_url(self, pull_request_id: int) -> str:
        return f"{self.organization_url}/{self.project}/_git/{self.repository}/pullrequest/{pull_request_id}"
