#!/usr/bin/env python3
"""Transaction Audit Automation.

This is the main entry point script for audit automation.
It wraps the package CLI for convenient execution.

Usage:
    python audit_transactions.py --input transactions.csv --export-dir reports

For full documentation and options:
    python audit_transactions.py --help
"""

import sys
from pathlib import Path

# Add src to path for development installs
src_path = Path(__file__).parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from audit_automation.cli import main

if __name__ == "__main__":
    sys.exit(main())
