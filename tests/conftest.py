"""Shared test fixtures for the caption_batch test suite.

WHY: Client, pipeline, batch and server tests all need a remote
transcription service that behaves like the real one without touching the
network.

HOW: FakeTranscriptionService implements the three endpoints in memory and
is mounted on an httpx.MockTransport. Each uploaded payload can be given a
scripted sequence of status responses; the last one repeats forever.

RULES:
- Nothing here performs real network I/O
- Uploads whose bytes are in fail_uploads answer HTTP 500
- Unscripted uploads complete immediately with empty text
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

import httpx
import pytest

from caption_batch.config import ServiceConfig

BASE_URL = "https://api.test/v2"
API_KEY = "test-key-123"


class FakeTranscriptionService:
    """In-memory stand-in for the upload / transcript API."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.fail_uploads: set = set()
        self._scripts: Dict[bytes, List[Dict[str, Any]]] = {}
        self._uploads: Dict[str, bytes] = {}
        self._jobs: Dict[str, List[Dict[str, Any]]] = {}

    def script(self, data: bytes, *statuses: Dict[str, Any]) -> None:
        """Set the status responses returned for jobs on this payload."""
        self._scripts[data] = list(statuses)

    def complete_with(self, data: bytes, text: str) -> None:
        self.script(
            data,
            {"status": "queued"},
            {"status": "processing"},
            {"status": "completed", "text": text},
        )

    def paths(self, method: str) -> List[str]:
        return [r.url.path for r in self.requests if r.method == method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "POST" and path == "/v2/upload":
            if request.content in self.fail_uploads:
                return httpx.Response(500, text="storage unavailable")
            upload_url = "https://cdn.test/upload/{}".format(len(self._uploads) + 1)
            self._uploads[upload_url] = request.content
            return httpx.Response(200, json={"upload_url": upload_url})

        if request.method == "POST" and path == "/v2/transcript":
            audio_url = json.loads(request.content)["audio_url"]
            data = self._uploads[audio_url]
            job_id = "job-{}".format(len(self._jobs) + 1)
            statuses = self._scripts.get(data, [{"status": "completed", "text": ""}])
            self._jobs[job_id] = list(statuses)
            return httpx.Response(200, json={"id": job_id, "status": "queued"})

        if request.method == "GET" and path.startswith("/v2/transcript/"):
            job_id = path.rsplit("/", 1)[-1]
            statuses = self._jobs.get(job_id)
            if statuses is None:
                return httpx.Response(404, text="not found")
            current = statuses.pop(0) if len(statuses) > 1 else statuses[0]
            return httpx.Response(200, json=dict(current, id=job_id))

        return httpx.Response(404, text="unknown endpoint")


@pytest.fixture
def service_config() -> ServiceConfig:
    return ServiceConfig(base_url=BASE_URL, api_key=API_KEY)


@pytest.fixture
def fake_service() -> FakeTranscriptionService:
    return FakeTranscriptionService()


@pytest.fixture
def transport(fake_service) -> httpx.MockTransport:
    return httpx.MockTransport(fake_service.handler)
