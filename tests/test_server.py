"""Tests for the FastAPI front end.

WHY: The HTTP layer maps batch outcomes to status codes and headers; a
wrong mapping means users download nothing or miss failed files.

HOW: The app is built with create_app() around the FakeTranscriptionService
transport and a zero poll interval, and driven with FastAPI's TestClient
inside a ``with`` block so the lifespan opens the shared client. In-flight
behaviour is checked by holding a real batch at its upload from a worker
thread while the main thread issues further requests.
"""

from __future__ import annotations

import asyncio
import io
import threading
import zipfile
from unittest.mock import patch

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from caption_batch import __version__
from caption_batch.server import app as app_module
from caption_batch.server.app import create_app


@pytest.fixture
def client(service_config, transport):
    app = create_app(config=service_config, transport=transport, poll_interval_s=0)
    with TestClient(app) as test_client:
        yield test_client


def _audio(name, content):
    return ("files", (name, io.BytesIO(content), "audio/mpeg"))


def _members(data: bytes):
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return {name: zf.read(name).decode("utf-8") for name in zf.namelist()}


class TestCreateBatch:
    def test_returns_zip_download(self, client, fake_service):
        fake_service.complete_with(b"a", "Hi\nThere")
        resp = client.post("/batches", files=[_audio("a.mp3", b"a")])

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/zip"
        assert resp.headers["content-disposition"] == 'attachment; filename="transcripts.zip"'
        assert resp.headers["x-batch-outcome"] == "completed"
        assert resp.headers["x-failed-files"] == ""
        assert list(_members(resp.content)) == ["a.mp3.srt"]

    def test_partial_failure_names_failed_files(self, client, fake_service):
        fake_service.complete_with(b"a", "Hi\nThere")
        fake_service.fail_uploads.add(b"b")
        resp = client.post(
            "/batches",
            files=[_audio("a.mp3", b"a"), _audio("b.mp3", b"b")],
        )

        assert resp.status_code == 200
        assert resp.headers["x-batch-outcome"] == "partial"
        assert resp.headers["x-failed-files"] == "b.mp3"
        assert list(_members(resp.content)) == ["a.mp3.srt"]

    def test_every_file_failed(self, client, fake_service):
        fake_service.fail_uploads.add(b"b")
        resp = client.post("/batches", files=[_audio("b.mp3", b"b")])

        assert resp.status_code == 502
        body = resp.json()
        assert body["failures"] == [
            {
                "file_name": "b.mp3",
                "kind": "UploadError",
                "message": body["failures"][0]["message"],
            }
        ]
        assert "HTTP 500" in body["failures"][0]["message"]

    def test_no_files(self, client, fake_service):
        resp = client.post("/batches", data={"note": "nothing attached"})
        assert resp.status_code == 400
        assert "No files selected" in resp.json()["detail"]
        assert fake_service.requests == []

    def test_path_components_are_stripped(self, client, fake_service):
        fake_service.complete_with(b"a", "x")
        resp = client.post("/batches", files=[_audio("../../etc/a.mp3", b"a")])
        assert resp.status_code == 200
        assert list(_members(resp.content)) == ["a.mp3.srt"]

    def test_failed_file_names_are_quoted(self, client, fake_service):
        fake_service.complete_with(b"a", "x")
        fake_service.fail_uploads.add(b"b")
        resp = client.post(
            "/batches",
            files=[_audio("a.mp3", b"a"), _audio("my talk.mp3", b"b")],
        )
        assert resp.headers["x-failed-files"] == "my%20talk.mp3"


class TestStatusAndHealth:
    def test_idle(self, client):
        resp = client.get("/status")
        assert resp.status_code == 200
        assert resp.json() == {"processing": False}

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.json() == {"status": "ok", "version": __version__}

    def test_openapi_lists_endpoints(self, client):
        paths = client.get("/openapi.json").json()["paths"]
        assert "post" in paths["/batches"]
        assert "/status" in paths
        assert "/health" in paths


class TestBatchInFlight:
    """A real batch is held open at its upload while other requests arrive."""

    def test_status_and_conflict_while_processing(self, service_config, fake_service):
        upload_started = threading.Event()
        release = threading.Event()

        async def gated_handler(request):
            if request.url.path == "/v2/upload":
                upload_started.set()
                while not release.is_set():
                    await asyncio.sleep(0.01)
            return fake_service.handler(request)

        fake_service.complete_with(b"a", "x")
        app = create_app(
            config=service_config,
            transport=httpx.MockTransport(gated_handler),
            poll_interval_s=0,
        )
        responses = []

        with TestClient(app) as test_client:
            worker = threading.Thread(
                target=lambda: responses.append(
                    test_client.post("/batches", files=[_audio("a.mp3", b"a")])
                )
            )
            worker.start()
            try:
                assert upload_started.wait(timeout=5)
                during = test_client.get("/status").json()
                conflict = test_client.post("/batches", files=[_audio("b.mp3", b"b")])
            finally:
                release.set()
                worker.join(timeout=5)
            after = test_client.get("/status").json()

        assert during == {"processing": True}
        assert conflict.status_code == 409
        assert "already" in conflict.json()["detail"].lower()
        assert responses[0].status_code == 200
        assert list(_members(responses[0].content)) == ["a.mp3.srt"]
        assert after == {"processing": False}
        assert fake_service.paths("POST").count("/v2/upload") == 1


class TestRunApi:
    def test_importing_the_module_builds_no_app(self):
        assert not hasattr(app_module, "app")

    def test_run_api_serves_a_fresh_app(self):
        with patch("uvicorn.run") as mock_run, patch("logging.basicConfig"):
            app_module.run_api()
        served = mock_run.call_args.args[0]
        assert isinstance(served, FastAPI)
        assert mock_run.call_args.kwargs == {"host": "0.0.0.0", "port": 8000}
