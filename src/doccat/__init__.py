"""doccat - keyword-based document categorization across worker processes."""

__version__ = "0.1.0"
