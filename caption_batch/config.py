"""Startup configuration and pipeline constants.

WHY: The transcription service endpoint and credential are process-wide
settings. They are read once at startup, frozen into a ServiceConfig and
handed to the client, so nothing downstream reads the environment.

HOW: python-dotenv loads the .env file on import. ServiceConfig.from_env()
reads exactly two variables. Timing constants and output names are plain
module-level values that callers override through constructor arguments.

RULES:
- Only TRANSCRIPTION_API_URL and TRANSCRIPTION_API_KEY come from the environment
- The API key is never hardcoded; a missing key raises ValueError
- ServiceConfig is immutable once built
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load .env from the project root (where the process is started from)
load_dotenv()

# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

API_URL_ENV = "TRANSCRIPTION_API_URL"
API_KEY_ENV = "TRANSCRIPTION_API_KEY"

DEFAULT_API_URL = "https://api.assemblyai.com/v2"

# ---------------------------------------------------------------------------
# Pipeline constants
# ---------------------------------------------------------------------------

POLL_INTERVAL_S = 5.0
"""Delay between two status fetches of a non-terminal job."""

CAPTION_INTERVAL_S = 2
"""Fixed duration given to every caption line."""

CAPTION_SUFFIX = ".srt"
ARCHIVE_NAME = "transcripts.zip"


@dataclass(frozen=True)
class ServiceConfig:
    """Endpoint and credential for the transcription service.

    RULES:
    - base_url is stored without a trailing slash
    - api_key is sent verbatim in the ``authorization`` header
    """

    base_url: str
    api_key: str

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("Transcription API key must not be empty.")
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(cls) -> ServiceConfig:
        """Build the config from the environment (populated by python-dotenv).

        RULES:
        - Raises ValueError if the key is missing or empty
        - The URL falls back to DEFAULT_API_URL
        """
        key = os.getenv(API_KEY_ENV, "").strip()
        if not key:
            raise ValueError(
                "Transcription API key not configured. "
                "Add {} to the .env file in the app folder.".format(API_KEY_ENV)
            )
        base_url = os.getenv(API_URL_ENV, "").strip() or DEFAULT_API_URL
        return cls(base_url=base_url, api_key=key)
