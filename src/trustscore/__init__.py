"""Trust scoring engine for package source repositories."""

__version__ = "0.1.0"
