"""Exception hierarchy shared by the gateway, storage, and pipeline layers."""

from __future__ import annotations


class ProcessingError(RuntimeError):
    """Base class for failures while ingesting or searching transcripts.

    ``retryable`` tells the HTTP boundary whether the caller may simply try
    again (timeouts) or whether the failure needs attention.
    """

    retryable = False


class GatewayError(ProcessingError):
    """The language-understanding service failed or returned nothing usable."""


class GatewayTimeoutError(GatewayError):
    retryable = True


class StorageError(ProcessingError):
    """The persistence layer rejected or failed a request.

    ``code`` carries the Postgres SQLSTATE when the database reported one.
    """

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class StorageTimeoutError(StorageError):
    retryable = True


class DuplicateTranscriptError(StorageError):
    """A transcript with this external ``transcript_id`` already exists."""

    def __init__(self, transcript_id: str) -> None:
        super().__init__(f"transcript {transcript_id!r} already exists", code="23505")
        self.transcript_id = transcript_id


class TranscriptNotFoundError(LookupError):
    def __init__(self, key: str) -> None:
        super().__init__(f"transcript {key!r} not found")
        self.key = key
