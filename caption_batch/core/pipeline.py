"""Per-file state machine: upload → create job → poll → format.

WHY: Each selected file goes through the same four steps, strictly in
order, and any step can fail. Tracking the state explicitly shows where a
file stopped when something went wrong.

HOW: FileJobPipeline.run() awaits each step in sequence, advancing
PipelineState between them. A CaptionBatchError from any step moves the
pipeline to FAILED, is kept on ``error`` and re-raised unchanged.

RULES:
- pending → uploading → job_created → polling → formatting → done
- failed is reachable from every non-terminal state and is terminal
- No retry inside the pipeline
- One pipeline instance handles one file and produces at most one entry
"""

from __future__ import annotations

import enum
import logging
from typing import Callable, Optional

from caption_batch.api.client import TranscriptionClient
from caption_batch.api.models import SourceFile
from caption_batch.core.archive import ArchiveEntry
from caption_batch.core.captions import CaptionTrack, format_captions
from caption_batch.core.polling import PollScheduler
from caption_batch.errors import CaptionBatchError

logger = logging.getLogger(__name__)


class PipelineState(str, enum.Enum):
    """Valid states of a FileJobPipeline."""

    PENDING = "pending"
    UPLOADING = "uploading"
    JOB_CREATED = "job_created"
    POLLING = "polling"
    FORMATTING = "formatting"
    DONE = "done"
    FAILED = "failed"


class FileJobPipeline:
    """Runs one file through the transcription service.

    Attributes:
        state: Current PipelineState.
        error: The error that moved the pipeline to FAILED, else None.
        job_id: Remote job id once the job has been created.
    """

    def __init__(
        self,
        client: TranscriptionClient,
        scheduler: PollScheduler,
        formatter: Callable[[str], CaptionTrack] = format_captions,
    ) -> None:
        self._client = client
        self._scheduler = scheduler
        self._formatter = formatter
        self.state = PipelineState.PENDING
        self.error: Optional[CaptionBatchError] = None
        self.job_id: Optional[str] = None
        self._source_name = ""

    def _advance(self, state: PipelineState) -> None:
        logger.debug("%s: %s -> %s", self._source_name, self.state.value, state.value)
        self.state = state

    async def run(self, source: SourceFile) -> ArchiveEntry:
        """Transcribe one file and return its caption archive entry.

        Raises:
            RuntimeError: if this pipeline has already been run.
            CaptionBatchError: the typed error of the first failing step.
        """
        if self.state is not PipelineState.PENDING:
            raise RuntimeError(
                "FileJobPipeline already ran (state: {})".format(self.state.value)
            )
        self._source_name = source.name

        try:
            self._advance(PipelineState.UPLOADING)
            upload_url = await self._client.upload(source)
            job = await self._client.create_job(upload_url)
            self.job_id = job.id
            self._advance(PipelineState.JOB_CREATED)

            self._advance(PipelineState.POLLING)
            text = await self._scheduler.poll_until_done(job.id)

            self._advance(PipelineState.FORMATTING)
            track = self._formatter(text)
        except CaptionBatchError as exc:
            self.error = exc
            self._advance(PipelineState.FAILED)
            raise

        self._advance(PipelineState.DONE)
        return ArchiveEntry.for_source(source.name, track.to_srt())
