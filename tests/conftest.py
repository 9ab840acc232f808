"""Pytest configuration: import trialkey and trialkey_dev from the checkout.

trialkey_dev is never installed, so the project root must be on sys.path.
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))
