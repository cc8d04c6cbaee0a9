"""Passkey-based employee attendance API."""

__version__ = "1.0.0"
