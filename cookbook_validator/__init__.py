"""cookbook-validator: pre-merge gate for single-cookbook pull requests."""

__version__ = "1.0.0"
