"""Errors raised while decoding and fusing activity data.

Both are fatal: decoders and fusion never return a partial result.
"""


class ActivityDataError(ValueError):
    """Base class for activity decoding failures."""


class ParseError(ActivityDataError):
    """The source text is not valid JSON / XML."""


class StructuralError(ActivityDataError):
    """The source parsed but lacks a required part (header, samples, points)."""
