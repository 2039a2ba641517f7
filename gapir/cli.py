"""Command line interface for gapir."""

import argparse
import logging
import os
import sys

import requests
from dotenv import load_dotenv

from . import base62
from .analyzer import PullRequestAnalyzer, ReviewerCollector
from .api_client import AzureDevOpsAuthError
from .config import AzureDevOpsConfiguration
from .output import OutputFormatter
from .reviewers_config import ReviewersConfigStore


def configure_logging(verbose: bool = False):
    """Configure root logging (LOG_LEVEL environment variable, --verbose forces DEBUG)."""
    log_level = 'DEBUG' if verbose else os.environ.get('LOG_LEVEL', 'WARNING').upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.WARNING),
        format='%(asctime)s %(levelname)s: %(message)s',
        datefmt='%m/%d/%Y %I:%M:%S %p'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='gapir',
        description="gapir (Graph API Review) - Azure DevOps pull request checker"
    )
    parser.add_argument('--verbose', '-v', action='store_true', help="Enable debug logging")
    subparsers = parser.add_subparsers(dest='command')

    for name, help_text in (('review', "Show pull requests pending your review (default)"),
                            ('approved', "Show pull requests you already approved")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument('--json', dest='output_json', action='store_true', help="Print JSON instead of tables")
        sub.add_argument('--full-urls', '-f', dest='short_urls', action='store_false',
                         help="Link to full Azure DevOps URLs instead of short g URLs")
        sub.add_argument('--detailed-timing', '-t', action='store_true',
                         help="Add the Age column to the approved table")
        sub.add_argument('--show-detailed-info', '-d', action='store_true',
                         help="Print a detail block for each pending PR")
        sub.add_argument('--no-statistics', dest='show_statistics', action='store_false',
                         help="Hide the statistics footer")
        sub.add_argument('--id-only', dest='match_display_name', action='store_false',
                         help="Match yourself among reviewers by account id only, not display name")

    subparsers.add_parser('collect', help="Rebuild the reviewers configuration from completed PRs")

    diagnose = subparsers.add_parser('diagnose', help="Show the raw reviewer data of one pull request")
    diagnose.add_argument('id', help="Pull request id, decimal or Base62")
    diagnose.add_argument('--id-only', dest='match_display_name', action='store_false',
                          help="Match yourself among reviewers by account id only, not display name")

    url = subparsers.add_parser('url', help="Print the pull request URL for a decimal or Base62 id")
    url.add_argument('id', help="Pull request id, decimal or Base62")
    url.add_argument('--short', action='store_true', help="Print the Base62 short URL instead")

    return parser


def get_token() -> str:
    token = os.environ.get('AZURE_DEVOPS_PAT')
    if not token:
        token = input("\nEnter Azure DevOps personal access token: ").strip()
    if not token:
        logging.error("A personal access token is required (set AZURE_DEVOPS_PAT)")
        sys.exit(1)
    return token


def run_url(config: AzureDevOpsConfiguration, args) -> int:
    try:
        pull_request_id = base62.resolve_pull_request_id(args.id)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    formatter = OutputFormatter(config, short_urls=args.short)
    print(formatter.pull_request_url(pull_request_id))
    return 0


def run_collect(config: AzureDevOpsConfiguration) -> int:
    collector = ReviewerCollector(config, get_token(), ReviewersConfigStore())
    collector.collect()
    return 0


def run_diagnose(config: AzureDevOpsConfiguration, args) -> int:
    try:
        pull_request_id = base62.resolve_pull_request_id(args.id)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    analyzer = PullRequestAnalyzer(
        config,
        get_token(),
        config_store=ReviewersConfigStore(),
        include_last_change=False,
        match_display_name=args.match_display_name,
    )
    try:
        diagnosis = analyzer.diagnose_pull_request(pull_request_id)
    except AzureDevOpsAuthError:
        raise
    except (requests.RequestException, KeyError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    OutputFormatter(config, use_links=False).print_diagnosis(diagnosis)
    return 0


def run_review(config: AzureDevOpsConfiguration, args) -> int:
    analyzer = PullRequestAnalyzer(
        config,
        get_token(),
        config_store=ReviewersConfigStore(),
        match_display_name=getattr(args, 'match_display_name', True),
    )
    result = analyzer.load_pull_requests()

    formatter = OutputFormatter(
        config,
        output_json=getattr(args, 'output_json', False),
        short_urls=getattr(args, 'short_urls', True),
        detailed_timing=getattr(args, 'detailed_timing', False),
        show_statistics=getattr(args, 'show_statistics', True),
        show_detailed_info=getattr(args, 'show_detailed_info', False),
    )
    if args.command == 'approved':
        formatter.print_approved(result)
    else:
        formatter.print_pending(result)

    return 1 if result.error_message else 0


def main(argv=None) -> int:
    """Main entry point."""
    # Load environment variables from .env file if it exists
    load_dotenv()

    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    config = AzureDevOpsConfiguration.from_env()

    try:
        if args.command == 'url':
            return run_url(config, args)
        if args.command == 'collect':
            return run_collect(config)
        if args.command == 'diagnose':
            return run_diagnose(config, args)
        return run_review(config, args)
    except AzureDevOpsAuthError as e:
        logging.error(f"Authentication failed: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
