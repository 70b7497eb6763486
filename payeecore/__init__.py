"""Payee core: duplicate detection for payee names."""

__version__ = "1.0.0"
