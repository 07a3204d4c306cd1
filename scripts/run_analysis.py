#!/usr/bin/env python3
"""Run the ENSO vs. Cascade pass snowfall analysis.

Fetches (or loads cached) ONI and WSDOT snowfall data, joins them, and
writes the combined table and figures.

Usage:
    python scripts/run_analysis.py --base-dir . --start-year 2005 --end-year 2024
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ensosnow.cli import main

if __name__ == "__main__":
    main()
