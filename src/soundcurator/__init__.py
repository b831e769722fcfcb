"""Curate notification sound packs from online audio providers."""

__version__ = "0.1.0"
