"""Poise - presentation practice session recorder."""

__version__ = "0.1.0"
