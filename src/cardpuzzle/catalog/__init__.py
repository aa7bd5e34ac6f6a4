"""Static card and album definitions."""
from .catalog import AlbumDefinition, AlbumReward, CardCatalog, CardDefinition, load_default_catalog

__all__ = [
    "AlbumDefinition",
    "AlbumReward",
    "CardCatalog",
    "CardDefinition",
    "load_default_catalog",
]
