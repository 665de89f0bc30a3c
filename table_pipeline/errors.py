"""Ingestion errors surfaced to the caller of a load.

Malformed rows are never an error: short rows are padded and long rows
truncated. Only an empty payload or an undecodable/unknown source aborts
a load.
"""

from __future__ import annotations


class ParseError(ValueError):
    """Base class for every failure of a single load attempt."""


class EmptyInput(ParseError):
    """No usable rows remain after blank lines/rows are dropped."""


class UnsupportedFormat(ParseError):
    """File extension or binary content is not a recognised table source."""


__all__ = ["ParseError", "EmptyInput", "UnsupportedFormat"]
