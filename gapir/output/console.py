"""Console rendering of pending and approved pull requests."""

import json
from typing import List

from .. import base62
from ..analyzer.core import filter_approved, filter_pending, get_statistics
from ..classifier import is_human_reviewer, vote_description
from ..config import AzureDevOpsConfiguration, SHORT_URL_BASE
from ..models import AnalysisResult, PullRequestDiagnosis, PullRequestInfo
from .text import create_link, format_table, shorten_title, supports_links


# ANSI color codes
GREEN = '\033[92m'
YELLOW = '\033[93m'
RED = '\033[91m'
CYAN = '\033[96m'
BOLD = '\033[1m'
RESET = '\033[0m'

STATUS_COLORS = {
    'Apprvd': GREEN,
    'Sugges': GREEN,
    'Wait4A': YELLOW,
    'Reject': RED,
}

PENDING_HEADERS = ['Title', 'Status', 'Author', 'Age', 'Ratio', 'Change']
PENDING_WIDTHS = [55, 6, 18, 10, 6, 20]
APPROVED_HEADERS = ['Author', 'Title', 'Why']
APPROVED_WIDTHS = [25, 75, 8]
APPROVED_DETAILED_HEADERS = ['Author', 'Title', 'Why', 'Age']
APPROVED_DETAILED_WIDTHS = [20, 65, 8, 25]


class OutputFormatter:
    """Formats and prints pull request analysis results."""

    def __init__(self, config: AzureDevOpsConfiguration, output_json: bool = False, short_urls: bool = False,
                 detailed_timing: bool = False, show_statistics: bool = True, use_links: bool = None,
                 use_color: bool = True, show_detailed_info: bool = False):
        """Initialize the output formatter.

        Args:
            config: Azure DevOps settings used to build pull request URLs
            output_json: Print JSON instead of tables
            short_urls: Link to Base62 short URLs instead of the full Azure DevOps URL
            detailed_timing: Add the Age column to the approved table
            show_statistics: Print the statistics footer
            use_links: Emit OSC 8 hyperlinks (None = detect from the terminal)
            use_color: Colour the Status column
            show_detailed_info: Print a detail block per pending PR after the table
        """
        self.config = config
        self.output_json = output_json
        self.short_urls = short_urls
        self.detailed_timing = detailed_timing
        self.show_statistics = show_statistics
        self.use_links = supports_links() if use_links is None else use_links
        self.use_color = use_color
        self.show_detailed_info = show_detailed_info

    def pull_request_url(self, pull_request_id: int) -> str:
        if self.short_urls:
            return f"{SHORT_URL_BASE}{base62.encode(pull_request_id)}"
        return self.config.pull_request_url(pull_request_id)

    def _title_cell(self, info: PullRequestInfo) -> str:
        title = shorten_title(info.title)
        if self.use_links:
            return create_link(title, self.pull_request_url(info.pull_request_id))
        return title

    def _status_cell(self, status: str) -> str:
        color = STATUS_COLORS.get(status)
        if self.use_color and color:
            return f"{color}{status}{RESET}"
        return status

    def print_pending(self, result: AnalysisResult):
        """Print PRs still waiting on the current user."""
        pending = filter_pending(result.pull_requests)
        if self.output_json:
            self._print_json('PendingPullRequests', result, pending)
            return

        print("gapir (Graph API Review) - Pull Requests Pending Review")
        print("=" * 63)
        print()
        if self._print_error(result):
            return

        print(f"{BOLD}{len(pending)} incomplete PR(s) assigned to {result.current_user.display_name}:{RESET}")
        if pending:
            rows = [
                [
                    self._title_cell(info),
                    self._status_cell(info.my_vote_status),
                    info.author_name,
                    info.time_assigned,
                    info.api_approval_ratio,
                    info.last_change_info,
                ]
                for info in pending
            ]
            self._print_table(PENDING_HEADERS, rows, PENDING_WIDTHS)
            if self.show_detailed_info:
                self._print_detailed_info(pending)
        else:
            print("No pull requests found requiring your review.")

        self._print_statistics(result)

    def print_approved(self, result: AnalysisResult):
        """Print PRs already approved by the current user that are not completed."""
        approved = filter_approved(result.pull_requests)
        if self.output_json:
            self._print_json('ApprovedPullRequests', result, approved)
            return

        print("gapir (Graph API Review) - Already Approved Pull Requests")
        print("=" * 63)
        print()
        if self._print_error(result):
            return

        print(f"{BOLD}{len(approved)} PR(s) already approved by {result.current_user.display_name}:{RESET}")
        if approved:
            print("Reason why PR is not completed: ")
            print("    Reject=Rejected, Wait4A=Waiting For Author, Policy=Policy/Build Issues")
            print("    PendRv=Pending Reviewer Approval, PendOt=Pending Other Approvals")

            if self.detailed_timing:
                headers, widths = APPROVED_DETAILED_HEADERS, APPROVED_DETAILED_WIDTHS
            else:
                headers, widths = APPROVED_HEADERS, APPROVED_WIDTHS

            rows = []
            for info in approved:
                row = [info.author_name, self._title_cell(info), info.pending_reason]
                if self.detailed_timing:
                    row.append(info.time_assigned)
                rows.append(row)
            self._print_table(headers, rows, widths)
        else:
            print("No approved pull requests found.")

        self._print_statistics(result)

    def print_diagnosis(self, diagnosis: PullRequestDiagnosis):
        """Print every reviewer's raw fields and the current user's matched entry."""
        pr = diagnosis.pull_request
        reviewers = pr.reviewers or []

        print(f"Investigating PR {pr.pull_request_id} reviewer details...")
        print("=" * 37)
        print(f"PR Title: {pr.title}")
        print(f"PR Status: {pr.status}")
        print(f"Created By: {pr.created_by_name}")
        print(f"Creation Date: {pr.creation_date:%Y-%m-%d %H:%M:%S}" if pr.creation_date else "Creation Date: Unknown")
        print(f"URL: {self.pull_request_url(pr.pull_request_id)}")
        print(f"Total Reviewers Count: {len(reviewers)}")
        print()

        if not reviewers:
            print("No reviewers found for this PR")
            return

        print("REVIEWER DETAILS:")
        print("=" * 16)
        for reviewer in reviewers:
            print(f"Reviewer: {reviewer.display_name}")
            print(f"  - Unique Name: {reviewer.unique_name}")
            print(f"  - ID: {reviewer.identifier}")
            print(f"  - Vote: {reviewer.vote} ({vote_description(reviewer.vote)})")
            print(f"  - IsRequired: {reviewer.is_required}")
            print(f"  - IsContainer: {reviewer.is_container}")
            print(f"  - API Reviewer: {reviewer.identifier in diagnosis.api_reviewer_ids}")
            print()

        me = diagnosis.my_entry
        if me is None:
            print(f"YOUR REVIEWER STATUS: NOT FOUND in reviewers list ({diagnosis.current_user.display_name}, "
                  f"{diagnosis.current_user.id})")
        else:
            print("YOUR REVIEWER STATUS:")
            print("=" * 20)
            print("Found in reviewers list: YES")
            print(f"Matched Entry: {me.display_name} ({me.identifier})")
            print(f"Your Vote: {me.vote} ({vote_description(me.vote)})")
            print(f"IsRequired: {me.is_required}")
            print(f"IsContainer: {me.is_container}")
        print(f"Status: {diagnosis.my_vote_status}")
        print(f"API Approval Ratio: {diagnosis.api_approval_ratio}")

    def _print_detailed_info(self, infos: List[PullRequestInfo]):
        print("Detailed information:")
        print("=" * 80)
        for info in infos:
            pr = info.pull_request
            print(f"ID: {pr.pull_request_id}")
            print(f"Title: {shorten_title(pr.title)}")
            print(f"Author: {pr.created_by_name}")
            print(f"Status: {pr.status}")
            if pr.creation_date:
                print(f"Created: {pr.creation_date:%Y-%m-%d %H:%M:%S}")
            print(f"URL: {self.pull_request_url(pr.pull_request_id)}")

            humans = [r for r in pr.reviewers or () if is_human_reviewer(r)]
            if humans:
                print("Reviewers:")
                for reviewer in humans:
                    print(f"  - {reviewer.display_name}: {vote_description(reviewer.vote)}")
            print("-" * 80)

    def _print_error(self, result: AnalysisResult) -> bool:
        if result.error_message:
            print(f"{RED}Error: {result.error_message}{RESET}")
            return True
        return False

    def _print_table(self, headers: List[str], rows: List[List[str]], widths: List[int]):
        print()
        for line in format_table(headers, rows, widths):
            print(line)
        print()

    def _print_statistics(self, result: AnalysisResult):
        if not self.show_statistics:
            return
        stats = get_statistics(result.pull_requests)
        print(f"{CYAN}Statistics:{RESET}")
        print(f"  Total Assigned: {stats.total_assigned}")
        print(f"  Pending Review: {stats.pending_review}")
        print(f"  Already Approved: {stats.already_approved}")

    def _print_json(self, kind: str, result: AnalysisResult, infos: List[PullRequestInfo]):
        payload = {
            'type': kind,
            'user': result.current_user.display_name,
            'statistics': get_statistics(result.pull_requests).to_dict(),
            'pullRequests': [
                dict(info.to_dict(), url=self.pull_request_url(info.pull_request_id)) for info in infos
            ],
        }
        if result.error_message:
            payload['error'] = result.error_message
        print(json.dumps(payload, indent=2, ensure_ascii=False))
