"""libroll - roll a shared library version across service repositories."""

__version__ = "0.1.0"
