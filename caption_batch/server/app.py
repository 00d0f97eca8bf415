"""FastAPI front end: accept a batch of audio files, return transcripts.zip.

WHY: Users pick files in a browser or script and want one archive back.
The HTTP layer stands in for the file-selection widget and the download
trigger; everything between them is the pipeline core.

HOW: create_app() builds a FastAPI app whose lifespan reads the service
config once, opens one TranscriptionClient for the life of the process and
wraps it in a BatchOrchestrator. POST /batches turns the multipart upload
into SourceFile values, awaits the orchestrator and answers with the zip.
Failed files are reported in response headers.

RULES:
- Config is read once at startup (or injected) and never changed
- 200 with the zip for completed and partial batches
- 400 for an empty batch, 409 while another batch is processing
- 502 when no file could be transcribed, 500 when the archive failed
- Uploaded file names are reduced to their base name
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated, List, Optional
from urllib.parse import quote

import httpx
from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from caption_batch import __version__
from caption_batch.api.client import TranscriptionClient
from caption_batch.api.models import SourceFile
from caption_batch.config import POLL_INTERVAL_S, ServiceConfig
from caption_batch.core.batch import BatchOrchestrator, BatchOutcome, BatchResult
from caption_batch.errors import (
    ArchiveBuildError,
    BatchInProgressError,
    NoFilesSelectedError,
)
from caption_batch.server.models import (
    BatchFailedResponse,
    ErrorResponse,
    FileFailureInfo,
    HealthResponse,
    StatusResponse,
)

logger = logging.getLogger(__name__)


def _failed_response(result: BatchResult) -> JSONResponse:
    body = BatchFailedResponse(
        detail="None of the {} file(s) could be transcribed.".format(len(result.failures)),
        failures=[
            FileFailureInfo(
                file_name=failure.file_name,
                kind=failure.kind,
                message=str(failure.error),
            )
            for failure in result.failures
        ],
    )
    return JSONResponse(status_code=502, content=body.model_dump())


def _archive_response(result: BatchResult) -> Response:
    return Response(
        content=result.archive,
        media_type="application/zip",
        headers={
            "Content-Disposition": 'attachment; filename="{}"'.format(result.archive_name),
            "X-Batch-Outcome": result.outcome.value,
            "X-Failed-Files": ",".join(quote(name) for name in result.failed_files),
        },
    )


def create_app(
    config: Optional[ServiceConfig] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    poll_interval_s: float = POLL_INTERVAL_S,
    max_concurrency: Optional[int] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Service config; read from the environment at startup if None.
        transport: Optional httpx transport for the transcription client.
        poll_interval_s: Delay between status fetches.
        max_concurrency: Optional cap on files processed at once.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the shared client on startup, close it on shutdown."""
        service_config = config or ServiceConfig.from_env()
        logger.info("Transcription service: %s", service_config.base_url)
        async with TranscriptionClient(service_config, transport=transport) as client:
            app.state.orchestrator = BatchOrchestrator(
                client,
                poll_interval_s=poll_interval_s,
                max_concurrency=max_concurrency,
            )
            yield

    app = FastAPI(
        lifespan=lifespan,
        title="Caption Batch API",
        description=(
            "Upload a batch of audio files. Each file is transcribed by the "
            "remote transcription service and converted to SRT captions; the "
            "captions are returned together as transcripts.zip."
        ),
        version=__version__,
    )

    @app.post(
        "/batches",
        tags=["batches"],
        summary="Transcribe a batch of audio files",
        description=(
            "Upload one or more audio files in the repeatable 'files' field. "
            "The response is transcripts.zip with one .srt member per file "
            "that was transcribed. Files that failed are listed in the "
            "X-Failed-Files header."
        ),
        response_class=Response,
        responses={
            200: {"content": {"application/zip": {}}, "description": "Caption archive"},
            400: {"model": ErrorResponse, "description": "No files selected"},
            409: {"model": ErrorResponse, "description": "A batch is already processing"},
            500: {"model": ErrorResponse, "description": "Archive could not be built"},
            502: {"model": BatchFailedResponse, "description": "Every file failed"},
        },
    )
    async def create_batch(
        request: Request,
        files: Annotated[
            Optional[List[UploadFile]],
            File(description="Audio files to transcribe."),
        ] = None,
    ) -> Response:
        orchestrator: BatchOrchestrator = request.app.state.orchestrator

        sources = []
        for upload in files or []:
            # Strip any client-supplied directory components
            name = Path(upload.filename or "upload").name
            sources.append(SourceFile(name=name, data=await upload.read()))

        try:
            result = await orchestrator.run(sources)
        except NoFilesSelectedError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        except BatchInProgressError as exc:
            raise HTTPException(status_code=409, detail=str(exc))
        except ArchiveBuildError as exc:
            logger.exception("Archive build failed")
            raise HTTPException(status_code=500, detail=str(exc))

        if result.outcome is BatchOutcome.FAILED:
            return _failed_response(result)
        return _archive_response(result)

    @app.get(
        "/status",
        response_model=StatusResponse,
        tags=["batches"],
        summary="Processing flag",
        description="Whether a batch is currently being processed.",
    )
    async def get_status(request: Request) -> StatusResponse:
        return StatusResponse(processing=request.app.state.orchestrator.processing)

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["health"],
        summary="Health check",
        description="Liveness check for load balancers and orchestrators.",
    )
    async def health_check() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    return app


def run_api() -> None:
    """Entry point for the caption-batch console script.

    The app is built here rather than at import time. To serve it with the
    uvicorn CLI instead, use ``uvicorn --factory caption_batch.server.app:create_app``.
    """
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
