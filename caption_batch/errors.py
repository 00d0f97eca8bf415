"""Typed error taxonomy for the batch caption pipeline.

WHY: Callers need to tell apart a failed upload, a job the remote service
rejected, and a broken archive without inspecting message strings. Every
failure the pipeline can report is one of the classes below.

HOW: All errors derive from CaptionBatchError so the batch boundary can
catch per-file failures with a single except clause. Network-facing errors
derive from RemoteServiceError and carry the HTTP status code when a
response was received.

RULES:
- Transport exceptions (httpx) never escape the client; they are chained
  via ``raise ... from exc`` onto one of these types
- Per-file errors are reported as labelled failures, never raised past the batch
- NoFilesSelectedError, BatchInProgressError and ArchiveBuildError are fatal
  for the whole run
"""

from __future__ import annotations

from typing import Optional


class CaptionBatchError(Exception):
    """Base class for every error raised by caption_batch."""


class RemoteServiceError(CaptionBatchError):
    """A request to the transcription service failed.

    WHY: Upload, job creation and status fetch all fail the same ways
    (connection error, non-2xx status, malformed body). Keeping the status
    code lets callers log what the service actually said.

    RULES:
    - status_code is None when no HTTP response was received
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.message = message
        self.status_code = status_code
        if status_code is not None:
            message = "{} (HTTP {})".format(message, status_code)
        super().__init__(message)


class UploadError(RemoteServiceError):
    """Uploading the audio bytes to the service failed."""


class JobCreationError(RemoteServiceError):
    """The service did not accept the transcription job."""


class StatusFetchError(RemoteServiceError):
    """Fetching the status of a transcription job failed."""


class TranscriptionFailedError(CaptionBatchError):
    """The remote job reached the ``failed`` terminal state."""

    def __init__(self, job_id: str, reason: Optional[str] = None) -> None:
        self.job_id = job_id
        self.reason = reason
        message = "Transcription {} failed".format(job_id)
        if reason:
            message = "{}: {}".format(message, reason)
        super().__init__(message)


class MissingTranscriptError(CaptionBatchError):
    """The service reported ``completed`` but returned no transcript text."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(
            "Transcription {} completed without transcript text".format(job_id)
        )


class NoFilesSelectedError(CaptionBatchError):
    """A batch was started with an empty file list."""

    def __init__(self) -> None:
        super().__init__("No files selected")


class BatchInProgressError(CaptionBatchError):
    """A batch was started while another one is still processing."""

    def __init__(self) -> None:
        super().__init__("A batch is already being processed")


class ArchiveBuildError(CaptionBatchError):
    """The caption archive could not be written."""
