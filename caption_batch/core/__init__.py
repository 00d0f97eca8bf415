"""Core pipeline: caption formatting, polling, per-file jobs and batching.

WHY: The stages that turn selected audio files into one caption archive
live here, independent of the HTTP front end that drives them.

RULES:
- Nothing in core reads the environment; configuration is injected
- Data flows forward: batch → pipeline → client/poller → captions → archive
"""

from caption_batch.core.archive import ArchiveBuilder, ArchiveEntry, build_archive
from caption_batch.core.batch import BatchOrchestrator, BatchOutcome, BatchResult, FileFailure
from caption_batch.core.captions import CaptionBlock, CaptionTrack, format_captions
from caption_batch.core.pipeline import FileJobPipeline, PipelineState
from caption_batch.core.polling import PollScheduler

__all__ = [
    "ArchiveBuilder",
    "ArchiveEntry",
    "BatchOrchestrator",
    "BatchOutcome",
    "BatchResult",
    "CaptionBlock",
    "CaptionTrack",
    "FileFailure",
    "FileJobPipeline",
    "PipelineState",
    "PollScheduler",
    "build_archive",
    "format_captions",
]
