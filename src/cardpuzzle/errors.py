class CardPuzzleError(Exception):
    """Base error for Card Puzzle domain exceptions."""


class CatalogError(CardPuzzleError):
    """Raised when bundled catalog or level data fails validation."""


class UnknownCardError(CardPuzzleError, KeyError):
    """Raised when a card id is not present in the catalog."""


class UnknownAlbumError(CardPuzzleError, KeyError):
    """Raised when an album id is not present in the catalog."""


class ConfigError(CardPuzzleError):
    """Raised when a progression config file cannot be loaded or is invalid."""


class SaveDecodeError(CardPuzzleError):
    """Raised when persisted save text is not a JSON object."""
