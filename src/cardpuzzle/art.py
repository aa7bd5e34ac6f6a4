"""Seed-keyed art references.

Rendering lives outside this package; the core only hands out stable
references the presentation layer knows how to draw.
"""
from __future__ import annotations

from dataclasses import dataclass


class ArtService:
    def art_reference(self, seed: int, kind: str = "card") -> str:  # pragma: no cover - interface
        raise NotImplementedError


@dataclass(frozen=True)
class SeededArtService(ArtService):
    """Deterministic references of the form ``generated://<kind>/<seed>?hue=<h>``."""

    scheme: str = "generated"

    def art_reference(self, seed: int, kind: str = "card") -> str:
        hue = (seed * 137) % 360
        return f"{self.scheme}://{kind}/{seed}?hue={hue}"


DEFAULT_ART_SERVICE = SeededArtService()
