"""Fixed-interval polling of a remote transcription job.

WHY: Transcription is asynchronous on the service side. After a job is
created the only way to learn about completion is to fetch its status
until it reaches completed or failed.

HOW: An explicit loop: fetch, return or raise on a terminal status,
otherwise sleep for the fixed interval and fetch again. The interval does
not grow and there is no attempt cap or overall timeout; the loop ends when
the service reports a terminal state or when the awaiting task is cancelled.

RULES:
- completed with text → return the text immediately, without sleeping
- completed without text → MissingTranscriptError
- failed → TranscriptionFailedError, no further fetch
- Cancellation abandons the poll; no cleanup request is sent
- StatusFetchError from the client propagates unchanged
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from caption_batch.api.client import TranscriptionClient
from caption_batch.api.models import JobStatus
from caption_batch.config import POLL_INTERVAL_S
from caption_batch.errors import MissingTranscriptError, TranscriptionFailedError

logger = logging.getLogger(__name__)


class PollScheduler:
    """Polls job status through a TranscriptionClient until a terminal state.

    RULES:
    - interval_s is the fixed delay between two fetches
    - sleep is injectable so tests can observe delays without waiting
    """

    def __init__(
        self,
        client: TranscriptionClient,
        interval_s: float = POLL_INTERVAL_S,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._client = client
        self.interval_s = interval_s
        self._sleep = sleep

    async def poll_until_done(self, job_id: str) -> str:
        """Wait for the job to finish and return its transcript text.

        Args:
            job_id: The id returned by TranscriptionClient.create_job().

        Returns:
            The transcript text of the completed job.
        """
        attempt = 0
        while True:
            attempt += 1
            job = await self._client.fetch_status(job_id)
            logger.debug("Poll %d for job %s: %s", attempt, job_id, job.status.value)

            if job.status is JobStatus.COMPLETED:
                if job.text is None:
                    raise MissingTranscriptError(job_id)
                return job.text

            if job.status is JobStatus.FAILED:
                raise TranscriptionFailedError(job_id, job.error)

            await self._sleep(self.interval_s)
