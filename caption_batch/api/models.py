"""Transcription service request and response dataclasses.

WHY: The service returns plain JSON for uploads and jobs. Typed snapshots
make the job lifecycle explicit and keep raw dict access inside one module.

HOW: SourceFile is the input handed to the pipeline. TranscriptionJob maps
the job JSON object; from_dict() parses a raw response and raises KeyError
or ValueError on malformed bodies, which the client translates.

RULES:
- A TranscriptionJob is a snapshot; a fresh fetch builds a new one
- text is only meaningful when status is completed
- The wire status "error" is an alias of failed
- Wrongly typed fields are malformed bodies, never passed downstream
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class JobStatus(str, enum.Enum):
    """Remote job states. completed and failed are terminal."""

    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)

    @classmethod
    def parse(cls, value: str) -> JobStatus:
        """Map a wire status string to a JobStatus.

        RULES:
        - "error" maps to FAILED
        - Unknown values raise ValueError
        """
        if value == "error":
            return cls.FAILED
        return cls(value)


@dataclass(frozen=True)
class SourceFile:
    """One selected audio file: display name plus raw bytes."""

    name: str
    data: bytes

    @classmethod
    def from_path(cls, path: Path) -> SourceFile:
        path = Path(path)
        return cls(name=path.name, data=path.read_bytes())


@dataclass(frozen=True)
class TranscriptionJob:
    """Snapshot of a remote transcription job.

    Attributes:
        id: Opaque job identifier assigned by the service.
        status: Current JobStatus.
        text: Transcript text, present once the job is completed.
        error: Error message from the service, present on some failures.
    """

    id: str
    status: JobStatus
    text: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> TranscriptionJob:
        """Parse a job from a ``/transcript`` response body.

        RULES:
        - id and status are required; id must be a string or an integer
        - text and error default to None and must otherwise be strings
        """
        job_id = data["id"]
        if isinstance(job_id, bool) or not isinstance(job_id, (str, int)):
            raise ValueError("Invalid job id: {!r}".format(job_id))
        return cls(
            id=str(job_id),
            status=JobStatus.parse(data["status"]),
            text=_optional_str(data, "text"),
            error=_optional_str(data, "error"),
        )


def _optional_str(data: dict, key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError("Field {!r} must be a string, got {}".format(key, type(value).__name__))
    return value
