"""Sound provider registry: get_source, list_sources, register_source."""

from __future__ import annotations

from soundcurator.errors import UnknownProvider
from soundcurator.sources.base import SoundProvider

_REGISTRY: dict[str, type] = {}


def register_source(name: str, cls: type) -> None:
    """Register a SoundProvider implementation by name."""
    _REGISTRY[name] = cls


def get_source(name: str, **kwargs) -> SoundProvider:
    """Return an instance of the named provider. Raises UnknownProvider if unknown."""
    if name not in _REGISTRY:
        raise UnknownProvider(f"Unknown provider: '{name}'. Available: {', '.join(list_sources())}")
    return _REGISTRY[name](**kwargs)


def list_sources() -> list[str]:
    """Return sorted list of registered provider names."""
    return sorted(_REGISTRY.keys())


# Register built-in sources
from soundcurator.sources.pixabay import PixabaySource  # noqa: E402
from soundcurator.sources.freesound import FreesoundSource  # noqa: E402
register_source("pixabay", PixabaySource)
register_source("freesound", FreesoundSource)
