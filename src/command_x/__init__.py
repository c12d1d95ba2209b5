"""Command X payment-item approval and financial rollup service."""

__version__ = "0.1.0"
