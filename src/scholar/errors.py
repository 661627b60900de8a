"""Exceptions raised by the scholar pipeline."""

from __future__ import annotations


class ScholarError(Exception):
    """Base class for every error the pipeline raises."""


class RequiredFieldError(ScholarError, ValueError):
    """A required query field (the query string) is empty."""


class InvalidServiceError(ScholarError, ValueError):
    """The requested search service is not known."""


class ScholarConnectionError(ScholarError, ConnectionError):
    """The page could not be fetched.

    The underlying transport exception is kept as ``__cause__``.
    """


TransportError = ScholarConnectionError


class ParseError(ScholarError):
    """The fetched document could not be parsed into a tree at all."""


class InvalidResponseError(ScholarError):
    """The fetched document is not a result listing (e.g. a CAPTCHA page)."""
