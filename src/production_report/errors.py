"""Error taxonomy of the report pipeline.

None of these is fatal to the process: callers report the message to the user
and keep whatever report was ready before the failed load.
"""

from __future__ import annotations


class ReportError(Exception):
    """Base class for user-facing pipeline failures."""


class ParseError(ReportError):
    """Source text is structurally invalid."""


class MissingRequiredColumnsError(ParseError):
    """The CSV header lacks one or more required columns."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__("CSV is missing required columns: " + ", ".join(self.missing))


class SourceUnavailable(ReportError):
    """A file or network source could not be read."""


class StorageError(ReportError):
    """The local dataset cache could not be written or read."""
