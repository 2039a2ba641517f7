"""
Reviewers configuration for gapir.

Stores the known members of the API reviewers group in a JSON file so the
tool still knows whose votes count when the live group lookup is not
available. The file is generated by the ``collect`` command.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set

DEFAULT_CONFIG_FILE = os.path.join(os.path.expanduser('~'), '.gapir', 'reviewers.json')

# Built-in list used when no configuration file exists, ordered by review count
FALLBACK_REVIEWERS = [
    ('chrispre@microsoft.com', 'Christof Sprenger', 31),
    ('yadavgaurav@microsoft.com', 'Gaurav Yadav', 25),
    ('kasrivat@microsoft.com', 'Karthik Srivatsa', 24),
    ('duchau@microsoft.com', 'Dulcinea Chau', 23),
    ('tcleveland@microsoft.com', 'Tyler Cleveland', 18),
    ('shasa@microsoft.com', 'Shantanu Saraswat', 17),
    ('chetanpatel@microsoft.com', 'Chetan Patel (AAD)', 6),
    ('vchianese@microsoft.com', 'Vincenzo Chianese', 4),
    ('jaimb@microsoft.com', 'Jaiprakash Bankolli Mallikarjun', 2),
    ('etbasser@microsoft.com', 'Etan Basseri', 1),
    ('dbutoyi@microsoft.com', 'Derrick Butoyi', 1),
    ('dawambug@microsoft.com', 'David Wambugu', 1),
    ('hut@microsoft.com', 'Hua Tang (she her)', 1),
    ('eketo@microsoft.com', 'Eric Keto', 1),
    ('abigailstein@microsoft.com', 'Abigail Stein', 1),
    ('davidra@microsoft.com', 'Dave Randall', 1),
    ('adbhale@microsoft.com', 'Aditya Mukund', 1),
    ('garethj@microsoft.com', 'Gareth Jones', 1),
]


@dataclass
class ApiReviewer:
    """A known API reviewer."""
    email: str
    display_name: str = ''
    pull_request_count: int = 0
    last_seen: Optional[str] = None

    def to_dict(self) -> Dict:
        data = {
            'email': self.email,
            'displayName': self.display_name,
            'pullRequestCount': self.pull_request_count,
        }
        if self.last_seen:
            data['lastSeen'] = self.last_seen
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> 'ApiReviewer':
        return cls(
            email=data['email'],
            display_name=data.get('displayName', ''),
            pull_request_count=int(data.get('pullRequestCount', 0)),
            last_seen=data.get('lastSeen'),
        )


@dataclass
class ReviewersConfiguration:
    """List of API reviewers plus where it came from."""
    reviewers: List[ApiReviewer] = field(default_factory=list)
    source: str = 'Generated from Azure DevOps API review pull requests'
    last_updated: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def email_addresses(self) -> Set[str]:
        """Reviewer emails, lower-cased for case-insensitive lookups."""
        return {r.email.lower() for r in self.reviewers if r.email}

    def to_dict(self) -> Dict:
        return {
            'lastUpdated': self.last_updated,
            'source': self.source,
            'reviewers': [r.to_dict() for r in self.reviewers],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'ReviewersConfiguration':
        return cls(
            reviewers=[ApiReviewer.from_dict(r) for r in data.get('reviewers', [])],
            source=data.get('source', ''),
            last_updated=data.get('lastUpdated', ''),
        )

    @classmethod
    def fallback(cls) -> 'ReviewersConfiguration':
        """The built-in reviewer list."""
        return cls(
            reviewers=[ApiReviewer(email, name, count) for email, name, count in FALLBACK_REVIEWERS],
            source='Built-in fallback list',
        )


class ReviewersConfigStore:
    """Loads and saves the reviewers configuration file."""

    def __init__(self, config_path: str = None):
        """
        Initialize the store.

        Args:
            config_path: Path to the JSON file (defaults to GAPIR_REVIEWERS_FILE or ~/.gapir/reviewers.json)
        """
        self.config_path = config_path or os.environ.get('GAPIR_REVIEWERS_FILE') or DEFAULT_CONFIG_FILE

    def exists(self) -> bool:
        return os.path.exists(self.config_path)

    def load(self) -> ReviewersConfiguration:
        """Load the configuration, falling back to the built-in list."""
        if self.exists():
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    config = ReviewersConfiguration.from_dict(json.load(f))
                    logging.info(f"Loaded reviewers config with {len(config.reviewers)} reviewer(s) from {self.config_path}")
                    return config
            except (json.JSONDecodeError, IOError, KeyError, TypeError, ValueError) as e:
                logging.warning(f"Could not load reviewers config from {self.config_path}: {e}")
        else:
            logging.info(f"No reviewers config found at {self.config_path}")

        config = ReviewersConfiguration.fallback()
        logging.info(f"Using built-in fallback list with {len(config.reviewers)} known API reviewers")
        return config

    def save(self, config: ReviewersConfiguration) -> None:
        """Write the configuration, stamping ``lastUpdated``.

        Raises:
            OSError: If the file cannot be written
        """
        directory = os.path.dirname(self.config_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        config.last_updated = datetime.now(timezone.utc).isoformat()
        try:
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(config.to_dict(), f, indent=2, ensure_ascii=False)
            logging.info(f"Saved reviewers config with {len(config.reviewers)} reviewer(s) to {self.config_path}")
        except IOError as e:
            logging.error(f"Could not save reviewers config to {self.config_path}: {e}")
            raise
