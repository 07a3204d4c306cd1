"""ENSO phase vs. Washington Cascade pass snowfall analysis."""

__version__ = "0.1.0"
