"""Stack Tracker: private, on-device precious metals portfolio tracking."""

__version__ = "0.1.0"
