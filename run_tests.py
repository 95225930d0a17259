#!/usr/bin/env python
"""Run the dialogue manager test suite.

    python run_tests.py               # everything
    python run_tests.py unit          # tests/unit only
    python run_tests.py integration   # tests/integration only
    python run_tests.py -k resolver   # anything else goes straight to pytest
"""

import subprocess
import sys

SUITES = {"unit": "tests/unit", "integration": "tests/integration"}

args = sys.argv[1:]
if args and args[0] in SUITES:
    args = [SUITES[args[0]], "-v"] + args[1:]
elif not args:
    args = ["tests/", "-v"]

result = subprocess.run([sys.executable, "-m", "pytest"] + args)
sys.exit(result.returncode)
