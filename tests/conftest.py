"""
Shared pytest setup.

Log file output is disabled before the package configures logging on first
import, so test runs never write to ``logs/``.
"""

import os
import sys

os.environ.setdefault("LOG_FILE_OUTPUT", "False")

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
