"""Pixabay sound source: free-tier search with direct download URLs."""

from __future__ import annotations

import logging
from pathlib import Path

from soundcurator.errors import DownloadFailed
from soundcurator.sources.base import (
    DownloadedFile,
    HTTPSource,
    SoundCandidate,
    format_duration,
    infer_extension,
)

logger = logging.getLogger(__name__)

API_URL = "https://pixabay.com/api/"

# Pixabay rejects per_page values outside this window.
_MIN_PER_PAGE = 3
_MAX_PER_PAGE = 200


class PixabaySource(HTTPSource):
    """Searches Pixabay sound effects. An API key is optional."""

    name = "pixabay"

    def _params(self, **params) -> dict:
        key = self._credentials.pixabay_api_key
        if key:
            params["key"] = key
        return params

    def search(self, query: str, limit: int = 20) -> list[SoundCandidate]:
        if not self._credentials.pixabay_api_key:
            logger.warning("PIXABAY_API_KEY not set, using limited rate")
        logger.info("Querying Pixabay for: %s", query)

        per_page = max(_MIN_PER_PAGE, min(limit, _MAX_PER_PAGE))
        data = self._get_json(
            API_URL,
            self._params(q=query, category="sound-effects", per_page=per_page),
        )
        total = data.get("totalHits") or 0
        if not total:
            logger.warning("No results found for: %s", query)
            return []
        logger.info("Found %s results", total)

        candidates = []
        for hit in data.get("hits") or []:
            audio = hit.get("audio") or None
            preview = hit.get("previewURL") or None
            if not (audio or preview):
                continue
            candidates.append(SoundCandidate(
                id=str(hit["id"]),
                provider=self.name,
                title=hit.get("tags", ""),
                source_url=hit.get("pageURL", ""),
                audio_url=audio,
                preview_url=preview,
                duration=format_duration(hit.get("duration")),
                license="pixabay",
            ))
        return candidates[:limit]

    def fetch(self, sound_id: str, destination_dir: Path) -> DownloadedFile:
        logger.info("Downloading Pixabay sound: %s", sound_id)
        data = self._get_json(API_URL, self._params(id=sound_id), error=DownloadFailed)
        hits = data.get("hits") or []
        audio_url = (hits[0].get("audio") or hits[0].get("previewURL")) if hits else None
        if not audio_url:
            raise DownloadFailed(f"Could not find audio URL for: {sound_id}")
        return self._download(
            audio_url, sound_id, destination_dir, infer_extension(audio_url, "mp3"),
        )
