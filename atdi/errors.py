"""
Exceptions raised by the ATDI pipelines.

Per-file read failures are not represented here: helpers return ``None`` for
an unreadable file and the caller leaves it out of that check.
"""


class ATDIError(Exception):
    """Base class for errors that abort a pipeline."""


class AnalysisIOError(ATDIError, IOError):
    """The source root is missing, is not a directory, or cannot be listed."""


class HistoryUnavailableError(ATDIError):
    """The version-control log cannot be queried at all."""
