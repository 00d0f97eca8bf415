"""Concurrent fan-out of file pipelines and packaging of the results.

WHY: A user selects several files at once and expects one archive back.
Transcription time is dominated by waiting on the remote service, so all
files are processed concurrently instead of one after another.

HOW: BatchOrchestrator.run() starts one FileJobPipeline per file with
asyncio.gather. Each pipeline's wrapper appends its entry to the shared
ArchiveBuilder as soon as it finishes, or records a FileFailure. When every
pipeline has settled, the archive is built and returned with the failures.

RULES:
- Empty file list → NoFilesSelectedError before any network call
- A run while another is processing → BatchInProgressError
- Unbounded fan-out unless max_concurrency is set
- Per-file errors are collected, never raised past the batch
- Entries are appended in completion order
- ArchiveBuildError is fatal for the run
- processing is True only while run() is executing
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from caption_batch.api.client import TranscriptionClient
from caption_batch.api.models import SourceFile
from caption_batch.config import ARCHIVE_NAME, POLL_INTERVAL_S
from caption_batch.core.archive import ArchiveBuilder, ArchiveEntry
from caption_batch.core.pipeline import FileJobPipeline
from caption_batch.core.polling import PollScheduler
from caption_batch.errors import (
    BatchInProgressError,
    CaptionBatchError,
    NoFilesSelectedError,
)

logger = logging.getLogger(__name__)


class BatchOutcome(str, enum.Enum):
    """User-visible result of a batch.

    RULES:
    - completed: every file produced an entry
    - partial: some files failed, at least one entry was produced
    - failed: no file produced an entry
    """

    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class FileFailure:
    """A file that did not make it into the archive, and why."""

    file_name: str
    error: CaptionBatchError

    @property
    def kind(self) -> str:
        return type(self.error).__name__


@dataclass
class BatchResult:
    """Archive bytes plus the per-file outcome of one run."""

    archive: bytes
    entries: List[ArchiveEntry] = field(default_factory=list)
    failures: List[FileFailure] = field(default_factory=list)
    archive_name: str = ARCHIVE_NAME

    @property
    def outcome(self) -> BatchOutcome:
        if not self.failures:
            return BatchOutcome.COMPLETED
        if self.entries:
            return BatchOutcome.PARTIAL
        return BatchOutcome.FAILED

    @property
    def failed_files(self) -> List[str]:
        return [failure.file_name for failure in self.failures]


class BatchOrchestrator:
    """Runs every selected file through its own FileJobPipeline.

    RULES:
    - client must already be inside its async context manager
    - max_concurrency=None means every file starts immediately
    """

    def __init__(
        self,
        client: TranscriptionClient,
        poll_interval_s: float = POLL_INTERVAL_S,
        max_concurrency: Optional[int] = None,
    ) -> None:
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._client = client
        self._poll_interval_s = poll_interval_s
        self._max_concurrency = max_concurrency
        self._processing = False

    @property
    def processing(self) -> bool:
        return self._processing

    def _new_pipeline(self) -> FileJobPipeline:
        scheduler = PollScheduler(self._client, interval_s=self._poll_interval_s)
        return FileJobPipeline(self._client, scheduler)

    async def run(self, files: Sequence[SourceFile]) -> BatchResult:
        """Transcribe all files concurrently and package the captions.

        Args:
            files: The selected files; must not be empty.

        Returns:
            BatchResult with the zip bytes, the stored entries and failures.
        """
        if not files:
            raise NoFilesSelectedError()
        if self._processing:
            raise BatchInProgressError()

        self._processing = True
        try:
            return await self._run(files)
        finally:
            self._processing = False

    async def _run(self, files: Sequence[SourceFile]) -> BatchResult:
        logger.info("Starting batch of %d file(s)", len(files))
        builder = ArchiveBuilder()
        failures: List[FileFailure] = []
        if self._max_concurrency is None:
            limiter = None
        else:
            limiter = asyncio.Semaphore(self._max_concurrency)

        async def _transcribe(source: SourceFile) -> None:
            try:
                entry = await self._new_pipeline().run(source)
            except CaptionBatchError as exc:
                logger.warning("File %s failed: %s", source.name, exc)
                failures.append(FileFailure(file_name=source.name, error=exc))
                return
            stored = builder.add(entry)
            logger.info("File %s transcribed (%s)", source.name, stored.name)

        async def _process(source: SourceFile) -> None:
            if limiter is None:
                await _transcribe(source)
                return
            async with limiter:
                await _transcribe(source)

        await asyncio.gather(*(_process(source) for source in files))

        archive = builder.build()
        result = BatchResult(
            archive=archive,
            entries=builder.entries,
            failures=failures,
        )
        logger.info(
            "Batch finished: %s (%d succeeded, %d failed)",
            result.outcome.value,
            len(result.entries),
            len(result.failures),
        )
        return result
