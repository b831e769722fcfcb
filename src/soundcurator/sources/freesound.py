"""Freesound sound source: token search, OAuth2 downloads with preview fallback."""

from __future__ import annotations

import logging
from pathlib import Path

from soundcurator.errors import DownloadFailed, MissingCredential
from soundcurator.sources.base import (
    DownloadedFile,
    HTTPSource,
    SoundCandidate,
    format_duration,
)

logger = logging.getLogger(__name__)

API_BASE = "https://freesound.org/apiv2"
SEARCH_URL = f"{API_BASE}/search/text/"
_SEARCH_FIELDS = "id,name,previews,license,duration,url"


def _preview_url(record: dict) -> str | None:
    previews = record.get("previews") or {}
    return previews.get("preview-hq-mp3") or previews.get("preview-lq-mp3") or None


class FreesoundSource(HTTPSource):
    """Searches Freesound. Search needs an API key; full-quality downloads
    need an OAuth2 token, otherwise the MP3 preview is fetched instead."""

    name = "freesound"

    def search(self, query: str, limit: int = 20) -> list[SoundCandidate]:
        api_key = self._credentials.freesound_api_key
        if not api_key:
            raise MissingCredential(
                "FREESOUND_API_KEY not set. "
                "Get a free API key at: https://freesound.org/apiv2/apply"
            )
        logger.info("Querying Freesound for: %s", query)

        data = self._get_json(SEARCH_URL, {
            "query": query,
            "filter": "type:wav",
            "fields": _SEARCH_FIELDS,
            "page_size": limit,
            "token": api_key,
        })
        count = data.get("count") or 0
        if not count:
            logger.warning("No results found for: %s", query)
            return []
        logger.info("Found %s results", count)

        candidates = []
        for record in data.get("results") or []:
            preview = _preview_url(record)
            if not preview:
                continue
            sound_id = str(record["id"])
            candidates.append(SoundCandidate(
                id=sound_id,
                provider=self.name,
                title=record.get("name", ""),
                source_url=record.get("url") or f"https://freesound.org/s/{sound_id}/",
                preview_url=preview,
                duration=format_duration(record.get("duration")),
                license=record.get("license") or "unknown",
            ))
        return candidates[:limit]

    def fetch(self, sound_id: str, destination_dir: Path) -> DownloadedFile:
        logger.info("Downloading Freesound sound: %s", sound_id)
        oauth_token = self._credentials.freesound_oauth_token
        api_key = self._credentials.freesound_api_key

        if oauth_token:
            return self._download(
                f"{API_BASE}/sounds/{sound_id}/download/",
                sound_id,
                destination_dir,
                "wav",
                headers={"Authorization": f"Bearer {oauth_token}"},
            )

        if not api_key:
            raise MissingCredential("FREESOUND_API_KEY or FREESOUND_OAUTH_TOKEN required")

        data = self._get_json(
            f"{API_BASE}/sounds/{sound_id}/",
            {"fields": "previews", "token": api_key},
            error=DownloadFailed,
        )
        preview = _preview_url(data)
        if not preview:
            raise DownloadFailed(f"Could not find download URL for: {sound_id}")
        downloaded = self._download(preview, sound_id, destination_dir, "mp3")
        logger.warning("Downloaded preview quality (full quality requires OAuth)")
        return downloaded
