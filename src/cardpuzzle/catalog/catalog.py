from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..errors import CatalogError, UnknownAlbumError, UnknownCardError
from .schema import read_data_resource, validate_document

logger = logging.getLogger(__name__)

CATALOG_RESOURCE = "catalog.json"
CATALOG_SCHEMA = "catalog.schema.json"


@dataclass(frozen=True)
class CardDefinition:
    id: str
    name: str
    rarity_stars: int
    album_id: str
    art_seed: int
    image_src: Optional[str] = None


@dataclass(frozen=True)
class AlbumReward:
    """Cosmetic reward shown when an album is completed."""

    name: str
    rarity: str = "Common"
    art_seed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "rarity": self.rarity, "artSeed": self.art_seed}


@dataclass(frozen=True)
class AlbumDefinition:
    id: str
    name: str
    card_ids: Tuple[str, ...]
    reward: Optional[AlbumReward] = None

    @property
    def size(self) -> int:
        return len(self.card_ids)


class CardCatalog:
    """
    Static, ordered table of albums and their cards.

    Catalog order (album order, then card order within the album) is the
    tie-breaker for every "next card" decision in the collection engine.
    """

    def __init__(self, albums: Sequence[AlbumDefinition], cards: Sequence[CardDefinition],
                 gift_card_ids: Sequence[str] = ()) -> None:
        self._albums: Dict[str, AlbumDefinition] = {}
        self._cards: Dict[str, CardDefinition] = {}
        for album in albums:
            if album.id in self._albums:
                raise CatalogError(f"Duplicate album id: {album.id}")
            self._albums[album.id] = album
        for card in cards:
            if card.id in self._cards:
                raise CatalogError(f"Duplicate card id: {card.id}")
            if card.album_id not in self._albums:
                raise CatalogError(f"Card {card.id} references unknown album {card.album_id}")
            self._cards[card.id] = card
        for gift_id in gift_card_ids:
            if gift_id not in self._cards:
                raise CatalogError(f"Gift card {gift_id} is not in the catalog")
        self._gift_card_ids = tuple(gift_card_ids)
        self._order: Tuple[str, ...] = tuple(cid for album in self._albums.values() for cid in album.card_ids)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], source: str = "<memory>") -> "CardCatalog":
        """Build a catalog from its JSON layout, validating with the JSON schema."""
        validate_document(data, CATALOG_SCHEMA, source=source)
        albums: List[AlbumDefinition] = []
        cards: List[CardDefinition] = []
        for raw_album in data["albums"]:
            album_id = raw_album["id"]
            reward = None
            raw_reward = raw_album.get("reward")
            if raw_reward:
                reward = AlbumReward(
                    name=raw_reward["name"],
                    rarity=raw_reward.get("rarity", "Common"),
                    art_seed=int(raw_reward.get("artSeed", 0)),
                )
            card_ids = []
            for idx, raw_card in enumerate(raw_album["cards"]):
                cards.append(
                    CardDefinition(
                        id=raw_card["id"],
                        name=raw_card["name"],
                        rarity_stars=int(raw_card["rarityStars"]),
                        album_id=album_id,
                        art_seed=int(raw_card.get("artSeed", idx)),
                        image_src=raw_card.get("imageSrc"),
                    )
                )
                card_ids.append(raw_card["id"])
            albums.append(AlbumDefinition(id=album_id, name=raw_album["name"], card_ids=tuple(card_ids), reward=reward))
        catalog = cls(albums, cards, data.get("giftCardIds", ()))
        logger.debug("Catalog %s: %d albums, %d cards", source, len(albums), len(cards))
        return catalog

    # Lookups

    @property
    def gift_card_ids(self) -> Tuple[str, ...]:
        return self._gift_card_ids

    def all_card_ids(self) -> Tuple[str, ...]:
        """Every card id in catalog order."""
        return self._order

    def total_cards(self) -> int:
        return len(self._order)

    def albums(self) -> List[AlbumDefinition]:
        return list(self._albums.values())

    def album_ids(self) -> List[str]:
        return list(self._albums)

    def album(self, album_id: str) -> AlbumDefinition:
        try:
            return self._albums[album_id]
        except KeyError as exc:
            raise UnknownAlbumError(f"Unknown album id: {album_id}") from exc

    def card(self, card_id: str) -> CardDefinition:
        try:
            return self._cards[card_id]
        except KeyError as exc:
            raise UnknownCardError(f"Unknown card id: {card_id}") from exc

    def has_card(self, card_id: str) -> bool:
        return card_id in self._cards

    def cards_in_album(self, album_id: str) -> List[CardDefinition]:
        return [self._cards[cid] for cid in self.album(album_id).card_ids]

    def album_cards(self) -> Mapping[str, Tuple[str, ...]]:
        """``{album_id: card_ids}`` in catalog order, as the save codec expects."""
        return {album.id: album.card_ids for album in self._albums.values()}

    def reward_for(self, album_id: str) -> Optional[AlbumReward]:
        return self.album(album_id).reward


@lru_cache(maxsize=1)
def load_default_catalog() -> CardCatalog:
    """The bundled catalog at cardpuzzle/data/catalog.json (cached)."""
    return CardCatalog.from_dict(read_data_resource(CATALOG_RESOURCE), source=CATALOG_RESOURCE)


__all__ = [
    "AlbumDefinition",
    "AlbumReward",
    "CardCatalog",
    "CardDefinition",
    "load_default_catalog",
]
