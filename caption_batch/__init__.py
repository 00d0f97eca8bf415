"""Batch audio-to-caption converter.

WHY: Users have a handful of audio files and want SRT captions for all of
them in one download. This package uploads each file to a remote
transcription service, waits for the jobs, turns every transcript into an
SRT track and zips the tracks together.

HOW: Three layers: the async API client (api/), the pipeline core (core/)
and an HTTP front end (server/) that accepts the files and returns the zip.

RULES:
- Configuration is read once at startup and injected
- Per-file failures never abort the rest of the batch
"""

__version__ = "0.1.0"
