"""Error types raised by the transcript pipeline.

Every stage fails fast with one of the subclasses below.  Each carries
a machine-readable ``kind`` and a human-readable message; the tool
layer in ``tools.transcript_tools`` turns them into MCP errors of the
form ``"{kind}: {message}"``.
"""

from __future__ import annotations


class TranscriptError(Exception):
    """Base class for all pipeline failures."""

    kind = "TranscriptError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class InvalidArgumentError(TranscriptError):
    """Bad video reference or bad tool argument types."""

    kind = "InvalidArgument"


class NetworkError(TranscriptError):
    """Timeout, connection failure or non-2xx HTTP status."""

    kind = "NetworkError"


class ParseError(TranscriptError):
    """Response body is not valid JSON."""

    kind = "ParseError"


class ApiError(TranscriptError):
    """Well-formed JSON carrying an error payload."""

    kind = "ApiError"


class NoTranscriptAvailableError(TranscriptError):
    """Neither known response shape contained caption segments."""

    kind = "NoTranscriptAvailable"
