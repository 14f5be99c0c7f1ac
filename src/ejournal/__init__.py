"""Electronic school journal API."""

__version__ = "0.1.0"
