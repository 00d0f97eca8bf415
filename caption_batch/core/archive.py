"""In-memory zip archive of caption files.

WHY: The batch hands the user one download instead of one file per input.

HOW: ArchiveBuilder collects ArchiveEntry values as pipelines complete and
writes them into a deflated zip held in a BytesIO buffer.

RULES:
- Members are written in the order entries were added
- Content is encoded as UTF-8
- A repeated member name gets a counter before its extension (a.mp3-2.srt)
- Any failure while writing the zip raises ArchiveBuildError
"""

from __future__ import annotations

import io
import logging
import zipfile
from dataclasses import dataclass
from typing import Iterable, List, Set

from caption_batch.config import CAPTION_SUFFIX
from caption_batch.errors import ArchiveBuildError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArchiveEntry:
    """One caption file destined for the archive."""

    name: str
    content: str

    @classmethod
    def for_source(cls, source_name: str, content: str) -> ArchiveEntry:
        """Name the entry after its source file, e.g. ``a.mp3`` → ``a.mp3.srt``."""
        return cls(name="{}{}".format(source_name, CAPTION_SUFFIX), content=content)


def _unique_name(name: str, taken: Set[str]) -> str:
    """Return name, or name with ``-N`` inserted before the extension if taken."""
    if name not in taken:
        return name

    dot_idx = name.rfind(".")
    if dot_idx > 0:
        stem, ext = name[:dot_idx], name[dot_idx:]
    else:
        stem, ext = name, ""

    counter = 2
    while True:
        candidate = "{}-{}{}".format(stem, counter, ext)
        if candidate not in taken:
            return candidate
        counter += 1


class ArchiveBuilder:
    """Accumulates archive entries and produces the zip bytes."""

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED) -> None:
        self._compression = compression
        self._entries: List[ArchiveEntry] = []
        self._names: Set[str] = set()

    @property
    def entries(self) -> List[ArchiveEntry]:
        return list(self._entries)

    def add(self, entry: ArchiveEntry) -> ArchiveEntry:
        """Append an entry, renaming it if its name is already taken.

        Returns:
            The entry as stored (possibly renamed).
        """
        name = _unique_name(entry.name, self._names)
        if name != entry.name:
            logger.info("Archive member %s renamed to %s", entry.name, name)
            entry = ArchiveEntry(name=name, content=entry.content)
        self._names.add(name)
        self._entries.append(entry)
        return entry

    def build(self) -> bytes:
        """Write all entries into a zip archive and return its bytes."""
        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, "w", self._compression) as zf:
                for entry in self._entries:
                    zf.writestr(entry.name, entry.content.encode("utf-8"))
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, ValueError) as exc:
            raise ArchiveBuildError("Failed to build archive: {}".format(exc)) from exc
        return buffer.getvalue()


def build_archive(entries: Iterable[ArchiveEntry]) -> bytes:
    """Build a zip archive from entries in one call."""
    builder = ArchiveBuilder()
    for entry in entries:
        builder.add(entry)
    return builder.build()
