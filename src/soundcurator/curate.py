"""Full curation pipeline: search -> fetch -> normalize -> assemble."""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Mapping, Sequence

from soundcurator.config import DEFAULT_AUTHOR, DEFAULT_DESCRIPTION, DEFAULT_VERSION
from soundcurator.convert import convert_directory
from soundcurator.errors import DownloadFailed
from soundcurator.logging_config import log_success
from soundcurator.pack import PackManifest, assemble
from soundcurator.sources.base import SoundProvider
from soundcurator.ui import StepSummary

logger = logging.getLogger(__name__)

CURATE_LIMIT = 10


def curate(
    provider: SoundProvider,
    pack_id: str,
    query: str,
    packs_dir,
    version: str = DEFAULT_VERSION,
    limit: int = CURATE_LIMIT,
    event_keywords: Mapping[str, Sequence[str]] | None = None,
    work_root=None,
    description: str = DEFAULT_DESCRIPTION,
    author: str = DEFAULT_AUTHOR,
) -> PackManifest:
    """Search a provider, download every result, normalize, and build a pack.

    Per-candidate download and conversion failures are logged and skipped.
    Search errors abort the run. The temporary working directory is always
    removed, whichever way the run ends.
    """
    logger.info("Starting curation: %s -> %s", provider.name, pack_id)
    work_dir = Path(tempfile.mkdtemp(prefix="soundcurator-", dir=work_root))
    try:
        downloads_dir = work_dir / "downloads"
        aiff_dir = work_dir / "aiff"
        downloads_dir.mkdir()

        candidates = provider.search(query, limit)

        fetched = StepSummary("Download")
        for candidate in candidates:
            try:
                downloaded = provider.fetch(candidate.id, downloads_dir)
            except DownloadFailed as e:
                logger.error("%s", e)
                fetched.record_failure(candidate.id, str(e))
                continue
            fetched.record_success(downloaded.path.name)
        logger.info(fetched.render())

        converted = StepSummary("Convert")
        convert_directory(downloads_dir, aiff_dir, summary=converted)
        logger.info(converted.render())

        manifest = assemble(
            pack_id,
            version,
            aiff_dir,
            packs_dir,
            event_keywords=event_keywords,
            description=description,
            author=author,
        )
    finally:
        shutil.rmtree(work_dir, ignore_errors=True)

    log_success(logger, "Curation complete: %s", pack_id)
    return manifest
