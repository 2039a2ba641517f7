#!/usr/bin/env python3
"""
gapir (Graph API Review)
Lists the Azure DevOps pull requests waiting on your review as an API reviewer.
"""

import sys

from gapir.cli import main


if __name__ == "__main__":
    sys.exit(main())
