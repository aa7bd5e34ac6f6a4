import json
import logging
from functools import lru_cache
from importlib.resources import files as resource_files
from typing import Any, Dict

from jsonschema import Draft202012Validator

from ..errors import CatalogError

logger = logging.getLogger(__name__)

DATA_PACKAGE = "cardpuzzle.data"


@lru_cache(maxsize=None)
def load_schema(schema_name: str) -> Dict[str, Any]:
    """
    Load a JSON schema bundled in cardpuzzle/data.

    The function is cached since the schemas are static.
    """
    text = resource_files(DATA_PACKAGE).joinpath(schema_name).read_text(encoding="utf-8")
    logger.debug("Loaded schema %s", schema_name)
    return json.loads(text)


def validate_document(data: Any, schema_name: str, source: str = "<memory>") -> None:
    """
    Validate a decoded JSON document against a bundled schema.

    Raises:
        CatalogError listing every violation if the data is invalid.
    """
    validator = Draft202012Validator(load_schema(schema_name))
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    if errors:
        for err in errors:
            logger.error("Schema violation in %s at %s: %s", source, list(err.path), err.message)
        details = "; ".join(f"{list(e.path)}: {e.message}" for e in errors)
        raise CatalogError(f"{source} failed {schema_name} validation: {details}")


def read_data_resource(resource_name: str) -> Any:
    """Read and decode a bundled JSON resource."""
    text = resource_files(DATA_PACKAGE).joinpath(resource_name).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CatalogError(f"{resource_name} is not valid JSON: {exc}") from exc
    return data


__all__ = [
    "read_data_resource",
    "load_schema",
    "validate_document",
]
