"""Base types and shared HTTP plumbing for sound providers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Protocol, runtime_checkable
from urllib.parse import urlparse

import httpx

from soundcurator.config import Credentials, load_config
from soundcurator.errors import CuratorError, DownloadFailed, ProviderUnavailable
from soundcurator.logging_config import log_success
from soundcurator.ratelimit import RateLimiter

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class SoundCandidate:
    """A single search result from a provider, not yet downloaded."""

    id: str
    provider: str
    title: str
    source_url: str
    audio_url: str | None = None
    preview_url: str | None = None
    duration: str = "unknown"
    license: str = "unknown"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "provider": self.provider,
            "title": self.title,
            "url": self.source_url,
            "audio_url": self.audio_url,
            "preview_url": self.preview_url,
            "duration": self.duration,
            "license": self.license,
        }


@dataclass(frozen=True)
class DownloadedFile:
    """A raw audio file fetched from a provider."""

    path: Path
    sound_id: str
    provider: str

    @property
    def extension(self) -> str:
        return self.path.suffix.lstrip(".")


@runtime_checkable
class SoundProvider(Protocol):
    """Protocol that all sound providers must implement."""

    @property
    def name(self) -> str: ...

    def search(self, query: str, limit: int = 20) -> list[SoundCandidate]: ...

    def fetch(self, sound_id: str, destination_dir: Path) -> DownloadedFile: ...

    def close(self) -> None: ...


def format_duration(value) -> str:
    """Render a provider duration as text, or 'unknown' when absent."""
    if value is None or value == "":
        return "unknown"
    return str(value)


def infer_extension(url: str, default: str) -> str:
    """Return the file extension of a URL path, falling back to default."""
    suffix = PurePosixPath(urlparse(url).path).suffix.lstrip(".").lower()
    return suffix if suffix.isalnum() else default


class HTTPSource:
    """Shared request handling for HTTP-backed providers.

    Subclasses set `name` and use `_get_json` and `_download` so that every
    request goes through the rate limiter and errors map onto the
    curation error types.
    """

    name = ""

    def __init__(
        self,
        credentials: Credentials | None = None,
        limiter: RateLimiter | None = None,
        client: httpx.Client | None = None,
    ):
        self._credentials = credentials or Credentials.from_env()
        self._limiter = limiter or RateLimiter(load_config().rate_limits)
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=_DEFAULT_TIMEOUT)
        return self._client

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _get_json(
        self,
        url: str,
        params: dict | None = None,
        error: type[CuratorError] = ProviderUnavailable,
    ) -> dict:
        """GET a JSON document. Raises `error` on any failure.

        Searches fail with ProviderUnavailable; per-sound lookups pass
        DownloadFailed so a single bad id only skips that sound.
        """
        self._limiter.throttle(self.name)
        try:
            response = self.client.get(url, params=params)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise error(f"{self.name} request failed: {e}") from e
        if not response.content:
            raise error(f"Empty response from {self.name}")
        try:
            return response.json()
        except ValueError as e:
            raise error(f"Malformed response from {self.name}: {e}") from e

    def _download(
        self,
        url: str,
        sound_id: str,
        destination_dir: Path,
        extension: str,
        headers: dict | None = None,
    ) -> DownloadedFile:
        """Transfer url to destination_dir/<sound_id>.<extension>."""
        destination_dir = Path(destination_dir)
        destination_dir.mkdir(parents=True, exist_ok=True)
        output_file = destination_dir / f"{sound_id}.{extension}"

        self._limiter.throttle(self.name)
        try:
            response = self.client.get(url, headers=headers, follow_redirects=True)
            response.raise_for_status()
            output_file.write_bytes(response.content)
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as e:
            raise DownloadFailed(f"Failed to download {sound_id}: {e}") from e

        if not output_file.exists():
            raise DownloadFailed(f"Failed to download: {sound_id}")
        log_success(logger, "Downloaded: %s", output_file)
        return DownloadedFile(path=output_file, sound_id=sound_id, provider=self.name)
