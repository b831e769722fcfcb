"""Preset configuration loading, merging and provider credentials."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

import yaml

from soundcurator.ratelimit import RateLimitPolicy


_BUNDLED_DIR = Path(__file__).parent / "presets"

DEFAULT_DESCRIPTION = "Sound pack curated from multiple providers"
DEFAULT_AUTHOR = "ccbell-sound-packs"
DEFAULT_VERSION = "1.0.0"


def load_preset(name: str, search_dirs: list[Path] | None = None) -> dict:
    """Load a preset by name from bundled presets or user directories.

    A path to an existing YAML file is loaded directly. Otherwise searches
    user directories first, then bundled presets.
    Raises FileNotFoundError if preset not found.
    """
    direct = Path(name)
    if direct.suffix in (".yaml", ".yml") and direct.is_file():
        with open(direct) as f:
            return yaml.safe_load(f) or {}

    dirs = list(search_dirs or []) + [_BUNDLED_DIR]
    for d in dirs:
        path = Path(d) / f"{name}.yaml"
        if path.exists():
            with open(path) as f:
                return yaml.safe_load(f) or {}
    raise FileNotFoundError(
        f"Preset '{name}' not found. Searched: {', '.join(str(d) for d in dirs)}"
    )


def merge_config(preset: dict, overrides: dict) -> dict:
    """Merge preset config with overrides. None values in overrides are ignored.

    Nested dicts are merged one level deep so a preset can override a single
    provider's rate limit without restating the others.
    """
    result = dict(preset)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = {**result[key], **value}
        else:
            result[key] = value
    return result


def list_presets(search_dirs: list[Path] | None = None) -> list[str]:
    """List available preset names from bundled and user directories."""
    dirs = list(search_dirs or []) + [_BUNDLED_DIR]
    names = set()
    for d in dirs:
        d = Path(d)
        if d.is_dir():
            for f in d.glob("*.yaml"):
                names.add(f.stem)
    return sorted(names)


@dataclass(frozen=True)
class CuratorConfig:
    """Read-only settings shared by the pipeline components."""

    rate_limits: Mapping[str, RateLimitPolicy]
    event_keywords: Mapping[str, tuple[str, ...]]
    description: str = DEFAULT_DESCRIPTION
    author: str = DEFAULT_AUTHOR
    version: str = DEFAULT_VERSION
    query_limit: int = 20
    curate_limit: int = 10

    @classmethod
    def from_dict(cls, data: dict) -> CuratorConfig:
        rate_limits = {
            name: RateLimitPolicy(
                max_requests=int(limits["max_requests"]),
                interval_seconds=int(limits["interval_seconds"]),
            )
            for name, limits in (data.get("rate_limits") or {}).items()
        }
        events = {
            event: tuple(str(k) for k in keywords)
            for event, keywords in (data.get("events") or {}).items()
        }
        pack = data.get("pack") or {}
        return cls(
            rate_limits=MappingProxyType(rate_limits),
            event_keywords=MappingProxyType(events),
            description=str(pack.get("description", DEFAULT_DESCRIPTION)),
            author=str(pack.get("author", DEFAULT_AUTHOR)),
            version=str(pack.get("version", DEFAULT_VERSION)),
            query_limit=int(data.get("query_limit", 20)),
            curate_limit=int(data.get("curate_limit", 10)),
        )


def load_config(preset: str = "default", search_dirs: list[Path] | None = None) -> CuratorConfig:
    """Build a CuratorConfig from the default preset overlaid with `preset`."""
    data = load_preset("default")
    if preset != "default":
        data = merge_config(data, load_preset(preset, search_dirs))
    return CuratorConfig.from_dict(data)


@dataclass(frozen=True)
class Credentials:
    """Provider credentials. Empty values mean "not configured"."""

    pixabay_api_key: str | None = field(default=None, repr=False)
    freesound_api_key: str | None = field(default=None, repr=False)
    freesound_oauth_token: str | None = field(default=None, repr=False)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Credentials:
        env = os.environ if environ is None else environ
        return cls(
            pixabay_api_key=env.get("PIXABAY_API_KEY") or None,
            freesound_api_key=env.get("FREESOUND_API_KEY") or None,
            freesound_oauth_token=env.get("FREESOUND_OAUTH_TOKEN") or None,
        )
