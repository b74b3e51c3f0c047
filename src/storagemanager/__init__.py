"""Storage manager for organization and space storage contexts."""

__version__ = "2.0.0"
