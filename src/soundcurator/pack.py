"""Pack assembly: map notification events to sounds and write pack.json."""

from __future__ import annotations

import json
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping, Sequence

from soundcurator.config import DEFAULT_AUTHOR, DEFAULT_DESCRIPTION, load_config
from soundcurator.convert import NORMALIZED_EXTENSION
from soundcurator.logging_config import log_success

logger = logging.getLogger(__name__)

MANIFEST_NAME = "pack.json"
SOUNDS_DIR = "sounds"


@dataclass
class PackManifest:
    """The pack.json document."""

    id: str
    name: str
    description: str
    author: str
    version: str
    events: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "author": self.author,
            "version": self.version,
            "events": dict(self.events),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2) + "\n"

    @classmethod
    def from_dict(cls, data: dict) -> PackManifest:
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description", ""),
            author=data.get("author", ""),
            version=data["version"],
            events=dict(data.get("events") or {}),
        )


def display_name(pack_id: str) -> str:
    """'retro-arcade-bells' -> 'Retro Arcade Bells'.

    Only the first letter of each word is changed.
    """
    words = pack_id.replace("-", " ").split()
    return " ".join(w[:1].upper() + w[1:] for w in words)


def list_normalized(sounds_dir) -> list[Path]:
    """Normalized files directly in sounds_dir, sorted by name."""
    sounds_dir = Path(sounds_dir)
    if not sounds_dir.is_dir():
        return []
    return sorted(
        (p for p in sounds_dir.glob(f"*{NORMALIZED_EXTENSION}") if p.is_file()),
        key=lambda p: p.name,
    )


def select_sound(keywords: Iterable[str], filenames: Sequence[str]) -> str | None:
    """Pick a file for one event.

    The first keyword with any matching filename wins, and the first
    matching filename for that keyword is taken. Matching is a
    case-sensitive substring test. Without a match the first filename is
    used; None when there are no files at all.
    """
    ordered = sorted(filenames)
    for keyword in keywords:
        for filename in ordered:
            if keyword in filename:
                return filename
    return ordered[0] if ordered else None


def map_events(event_keywords: Mapping[str, Sequence[str]], filenames: Sequence[str]) -> dict[str, str]:
    """Map every event to a filename; events with no candidate are left out."""
    events = {}
    for event, keywords in event_keywords.items():
        chosen = select_sound(keywords, filenames)
        if chosen is None:
            logger.warning("No sound available for event: %s", event)
            continue
        events[event] = chosen
        logger.info("Mapped %s -> %s", event, chosen)
    return events


def assemble(
    pack_id: str,
    version: str,
    sounds_dir,
    output_root,
    event_keywords: Mapping[str, Sequence[str]] | None = None,
    description: str = DEFAULT_DESCRIPTION,
    author: str = DEFAULT_AUTHOR,
) -> PackManifest:
    """Build <output_root>/<pack_id>/ from the normalized files in sounds_dir.

    The pack is recreated on every call: its sounds/ directory is replaced
    with a copy of every normalized file and pack.json is overwritten.
    """
    if event_keywords is None:
        event_keywords = load_config().event_keywords

    logger.info("Creating pack: %s v%s", pack_id, version)
    files = list_normalized(sounds_dir)

    manifest = PackManifest(
        id=pack_id,
        name=display_name(pack_id),
        description=description,
        author=author,
        version=version,
        events=map_events(event_keywords, [f.name for f in files]),
    )

    pack_dir = Path(output_root) / pack_id
    target_sounds = pack_dir / SOUNDS_DIR
    if target_sounds.exists():
        shutil.rmtree(target_sounds)
    target_sounds.mkdir(parents=True)
    for f in files:
        shutil.copy2(f, target_sounds / f.name)

    (pack_dir / MANIFEST_NAME).write_text(manifest.to_json())
    log_success(logger, "Created pack: %s", pack_dir)
    return manifest


def read_manifest(pack_dir) -> PackManifest:
    """Load pack.json from an assembled pack directory."""
    path = Path(pack_dir) / MANIFEST_NAME
    return PackManifest.from_dict(json.loads(path.read_text()))
