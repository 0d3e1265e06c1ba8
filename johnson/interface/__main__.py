"""
Run the Johnson CLI.

Usage:
    python -m johnson.interface resolve scenario.yaml --seed 42
"""

import sys

from .cli import main

sys.exit(main())
