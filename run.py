"""
Development runner script for askr.
This script allows running the prompt without installation.
"""

import os
import sys

# Add src directory to Python path for local development
sys.path.insert(0, os.path.abspath("src"))

from askr_tui.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
