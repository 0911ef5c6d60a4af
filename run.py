#!/usr/bin/env python
"""
Entry point for running a cleanup without installing the package.

Usage:
    python run.py                       # Sweep rules from config.yaml
    python run.py --config rules.yaml   # Custom rule file
    python run.py --dry-run             # Preview only
"""

import sys

from redis_cleaner.cli import main


if __name__ == "__main__":
    sys.exit(main())
