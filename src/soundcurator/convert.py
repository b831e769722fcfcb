"""Normalize downloaded audio to 16-bit big-endian PCM AIFF."""

from __future__ import annotations

import logging
from pathlib import Path

from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError, CouldntEncodeError

from soundcurator.errors import TranscodeFailed
from soundcurator.logging_config import log_success
from soundcurator.ui import StepSummary

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".mp3", ".wav", ".ogg", ".flac"}
NORMALIZED_EXTENSION = ".aiff"
_CODEC = "pcm_s16be"


def normalize(input_path, output_path) -> Path:
    """Convert any supported audio file to AIFF (pcm_s16be). Returns output path.

    Raises TranscodeFailed if ffmpeg fails or no output is produced.
    """
    input_path = Path(input_path)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        sound = AudioSegment.from_file(str(input_path))
        sound.export(str(output_path), format="aiff", codec=_CODEC)
    except (CouldntDecodeError, CouldntEncodeError, OSError) as e:
        raise TranscodeFailed(f"Failed to convert {input_path}: {e}") from e
    if not output_path.exists() or output_path.stat().st_size == 0:
        raise TranscodeFailed(f"Failed to convert {input_path}: no output produced")
    return output_path


def find_audio_files(input_dir) -> list[Path]:
    """Return supported audio files under input_dir, recursively, sorted."""
    return sorted(
        p for p in Path(input_dir).rglob("*")
        if p.is_file() and p.suffix.lower() in SUPPORTED_EXTENSIONS
    )


def convert_directory(input_dir, output_dir, summary: StepSummary | None = None) -> list[Path]:
    """Normalize every supported file under input_dir into output_dir.

    A failed conversion is logged and skipped; it never aborts the batch.
    Returns the paths of the files that converted cleanly.
    """
    input_dir = Path(input_dir)
    output_dir = Path(output_dir)
    logger.info("Converting sounds to AIFF format...")
    output_dir.mkdir(parents=True, exist_ok=True)
    if not input_dir.is_dir():
        logger.warning("Input directory does not exist: %s", input_dir)
        return []

    converted = []
    for source in find_audio_files(input_dir):
        target = output_dir / f"{source.stem}{NORMALIZED_EXTENSION}"
        logger.info("Converting: %s", source.stem)
        try:
            normalize(source, target)
        except TranscodeFailed as e:
            logger.error("%s", e)
            if summary is not None:
                summary.record_failure(source.name, str(e))
            continue
        log_success(logger, "Created: %s", target)
        if summary is not None:
            summary.record_success(target.name)
        converted.append(target)
    return converted
