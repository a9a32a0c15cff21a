# src/jira_outline/errors.py
from __future__ import annotations


class OutlineError(Exception):
    """Base class for everything the export pipeline raises on purpose."""


class ConfigError(OutlineError):
    pass


class NetworkError(OutlineError):
    """The search request could not be completed (DNS, connect, TLS, timeout)."""


class ParseError(OutlineError):
    """The search response was not JSON or did not carry an ``issues`` list."""


class MissingIssueKeyError(ParseError):
    pass


class OutputError(OutlineError, OSError):
    """The output file could not be written."""


__all__ = [
    "OutlineError",
    "ConfigError",
    "NetworkError",
    "ParseError",
    "MissingIssueKeyError",
    "OutputError",
]
