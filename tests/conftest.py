"""Pytest configuration for the smallc test suite."""

import sys
from pathlib import Path

# Add src directory to path so the package imports without installation
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
