"""Transcript text to SRT caption track with synthetic timestamps.

WHY: The transcription service returns plain text without per-line timing.
Editors still want an SRT file they can load, so every non-empty line gets
a fixed-length slot on a regular cadence. The timestamps are an
approximation, not speech alignment.

HOW: format_captions() splits on runs of newlines, drops empty segments and
assigns line i the interval [i * interval_s, (i + 1) * interval_s).
CaptionTrack.to_srt() renders the blocks in SubRip layout.

RULES:
- Pure and deterministic: same text in, identical track out
- Milliseconds are always rendered as 000
- Hours are zero-padded to two digits and never wrap
- Blocks are joined by a blank line with no trailing newline
- Empty text produces an empty track whose SRT text is ""
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Tuple

from caption_batch.config import CAPTION_INTERVAL_S

_LINE_BREAKS = re.compile(r"\n+")


def format_timestamp(seconds: int) -> str:
    """Render whole seconds as an SRT timestamp, e.g. 62 → ``00:01:02,000``."""
    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    return "{:02d}:{:02d}:{:02d},000".format(hours, minutes, secs)


@dataclass(frozen=True)
class CaptionBlock:
    """One timed caption line.

    Attributes:
        index: 1-based sequence number.
        start_s: Start offset in whole seconds.
        end_s: End offset in whole seconds.
        text: The caption line.
    """

    index: int
    start_s: int
    end_s: int
    text: str

    def to_srt(self) -> str:
        return "{}\n{} --> {}\n{}".format(
            self.index,
            format_timestamp(self.start_s),
            format_timestamp(self.end_s),
            self.text,
        )


@dataclass(frozen=True)
class CaptionTrack:
    """Ordered, immutable sequence of caption blocks."""

    blocks: Tuple[CaptionBlock, ...] = ()

    def __len__(self) -> int:
        return len(self.blocks)

    def __iter__(self) -> Iterator[CaptionBlock]:
        return iter(self.blocks)

    def to_srt(self) -> str:
        return "\n\n".join(block.to_srt() for block in self.blocks)


def format_captions(text: str, interval_s: int = CAPTION_INTERVAL_S) -> CaptionTrack:
    """Turn transcript text into a caption track, one block per line.

    Args:
        text: Transcript text; lines are separated by one or more newlines.
        interval_s: Duration given to every caption line.

    Returns:
        CaptionTrack with one block per non-empty line, in input order.
    """
    lines = [line for line in _LINE_BREAKS.split(text) if line]
    return CaptionTrack(
        blocks=tuple(
            CaptionBlock(
                index=i + 1,
                start_s=i * interval_s,
                end_s=(i + 1) * interval_s,
                text=line,
            )
            for i, line in enumerate(lines)
        )
    )
