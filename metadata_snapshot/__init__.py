"""Crawl cloud instance/container metadata services into a single snapshot."""

__version__ = "0.1.0"
