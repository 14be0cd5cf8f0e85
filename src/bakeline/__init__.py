"""Bakeline - production timing and SPC analytics for a bakery line."""

__version__ = "0.1.0"
