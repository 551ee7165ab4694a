"""
Teams Work-Hours Tracker

A command-line application that pulls attendance calendars from the
HR API and reports worked hours and effective workdays.
"""

import sys
from pathlib import Path

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent / "src"))

from ui.console import run_app


def main():
    """Application entry point."""
    sys.exit(run_app())


if __name__ == "__main__":
    main()
