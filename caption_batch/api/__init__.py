"""Transcription service client package.

WHY: Every request to the remote transcription service goes through one
async client, so authentication and error translation live in one place.

RULES:
- All HTTP calls go through TranscriptionClient (no direct httpx usage elsewhere)
- Response data is parsed into the dataclasses in models.py
"""

from caption_batch.api.client import TranscriptionClient
from caption_batch.api.models import JobStatus, SourceFile, TranscriptionJob

__all__ = ["JobStatus", "SourceFile", "TranscriptionClient", "TranscriptionJob"]
