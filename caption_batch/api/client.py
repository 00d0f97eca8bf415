"""Async HTTP client for the remote transcription service.

WHY: The pipeline needs three remote operations: upload raw audio, create a
transcription job for the uploaded audio, and fetch a job's status. This
module keeps every HTTP detail (headers, paths, status codes, JSON parsing)
behind one class so the pipeline only sees typed results and typed errors.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. TranscriptionClient is an
async context manager; enter it to open an authenticated connection pool,
exit to close it. Each operation is one round-trip through _request(), which
translates transport errors, non-2xx responses and malformed bodies into the
error class passed by the caller.

RULES:
- Always use the async context manager (async with TranscriptionClient(...) as client:)
- The credential goes in the ``authorization`` header as-is (no Bearer prefix)
- Uploads are sent as application/octet-stream
- No request timeout unless the caller passes timeout_s
- httpx exceptions never escape; they are chained onto UploadError,
  JobCreationError or StatusFetchError
"""

from __future__ import annotations

from typing import Optional, Type

import httpx

from caption_batch.api.models import SourceFile, TranscriptionJob
from caption_batch.config import ServiceConfig
from caption_batch.errors import (
    JobCreationError,
    RemoteServiceError,
    StatusFetchError,
    UploadError,
)


class TranscriptionClient:
    """Async client for the upload / transcript endpoints.

    WHY: One object owns the credential and the connection pool for the
    whole process, so concurrent pipelines share connections instead of
    each opening their own.

    HOW: Wraps httpx.AsyncClient configured with the service base URL and
    the authorization header from the injected ServiceConfig.

    RULES:
    - config is required; the client never reads the environment
    - transport is optional and exists for tests (httpx.MockTransport)
    """

    def __init__(
        self,
        config: ServiceConfig,
        timeout_s: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._timeout = httpx.Timeout(timeout_s)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> TranscriptionClient:
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            headers={"authorization": self._config.api_key},
            timeout=self._timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "TranscriptionClient must be used as an async context manager: "
                "async with TranscriptionClient(config) as client: ..."
            )
        return self._client

    async def _request(
        self,
        error_cls: Type[RemoteServiceError],
        action: str,
        method: str,
        url: str,
        **kwargs,
    ) -> dict:
        """Send one request and return the decoded JSON body.

        RULES:
        - httpx.HTTPError → error_cls without status_code
        - non-2xx → error_cls with status_code and the response text
        - body that is not a JSON object → error_cls
        """
        client = self._ensure_client()
        try:
            resp = await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise error_cls("{} failed: {}".format(action, exc)) from exc

        if not resp.is_success:
            raise error_cls(
                "{} failed: {}".format(action, resp.text.strip() or resp.reason_phrase),
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise error_cls(
                "{} returned a non-JSON body".format(action),
                status_code=resp.status_code,
            ) from exc
        if not isinstance(data, dict):
            raise error_cls(
                "{} returned an unexpected body".format(action),
                status_code=resp.status_code,
            )
        return data

    # ------------------------------------------------------------------
    # Step 1: Upload
    # ------------------------------------------------------------------

    async def upload(self, source: SourceFile) -> str:
        """Upload raw audio bytes and return the service's upload URL.

        Args:
            source: The file to upload.

        Returns:
            The ``upload_url`` that references the stored bytes.
        """
        data = await self._request(
            UploadError,
            "Upload of {}".format(source.name),
            "POST",
            "/upload",
            content=source.data,
            headers={"content-type": "application/octet-stream"},
        )
        upload_url = data.get("upload_url")
        if not isinstance(upload_url, str) or not upload_url:
            raise UploadError("Upload of {} returned no upload_url".format(source.name))
        return upload_url

    # ------------------------------------------------------------------
    # Step 2: Create transcription job
    # ------------------------------------------------------------------

    async def create_job(self, upload_url: str) -> TranscriptionJob:
        """Create a transcription job for previously uploaded audio.

        Returns:
            The initial job snapshot (normally queued, no text).
        """
        data = await self._request(
            JobCreationError,
            "Job creation",
            "POST",
            "/transcript",
            json={"audio_url": upload_url},
        )
        try:
            return TranscriptionJob.from_dict(data)
        except (KeyError, ValueError) as exc:
            raise JobCreationError(
                "Job creation returned a malformed job: {!r}".format(exc)
            ) from exc

    # ------------------------------------------------------------------
    # Step 3: Fetch job status
    # ------------------------------------------------------------------

    async def fetch_status(self, job_id: str) -> TranscriptionJob:
        """Fetch a fresh snapshot of a transcription job."""
        data = await self._request(
            StatusFetchError,
            "Status fetch for {}".format(job_id),
            "GET",
            "/transcript/{}".format(job_id),
        )
        try:
            return TranscriptionJob.from_dict(data)
        except (KeyError, ValueError) as exc:
            raise StatusFetchError(
                "Status fetch for {} returned a malformed job: {!r}".format(job_id, exc)
            ) from exc
