"""Domain errors raised while crawling metadata services."""
from __future__ import annotations


class MetadataError(Exception):
    """Base error for metadata crawling failures."""


class NotFoundError(MetadataError):
    """Raised when the metadata service answers 404 for a path."""


class TransportError(MetadataError):
    """Raised when a request cannot be built or sent."""


class TransportTimeoutError(TransportError):
    """Raised when a request times out."""


class ParseError(MetadataError):
    """Raised when a body or the container metadata file cannot be read or decoded."""


class DepthLimitError(MetadataError):
    """Raised instead of descending past the configured directory depth."""
