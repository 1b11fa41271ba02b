"""Static image catalog source.

Architectural role:
    Supplies the immutable list of `CatalogItem` values the selection state is
    built from. The catalog is read once at startup and never mutated.

Sources:
    - `CATALOG_FILE` env var: JSON array of `{"reference": ..., "label": ...}`
      objects (`url` is accepted as an alias of `reference`).
    - Otherwise the built-in baked-goods catalog.

Failure handling:
    A configured catalog file that is missing, unreadable, or empty raises
    `ValueError` at load time; there is no silent fallback to the defaults.
"""

import json
import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

CATALOG_FILE = os.getenv("CATALOG_FILE")


@dataclass(frozen=True)
class CatalogItem:
    """One selectable image.

    Attributes:
        reference: Opaque locator resolved by `recipe_vision.image.encoder`
            (relative path, absolute path, `file://` or `http(s)://` URL).
        label: Display name.
    """

    reference: str
    label: str


DEFAULT_CATALOG = (
    CatalogItem("assets/images/baked_goods_1.jpg", "Baked Good 1"),
    CatalogItem("assets/images/baked_goods_2.jpg", "Baked Good 2"),
    CatalogItem("assets/images/baked_goods_3.jpg", "Baked Good 3"),
)


def parse_catalog(entries) -> tuple[CatalogItem, ...]:
    """Build catalog items from decoded JSON entries.

    Raises:
        ValueError: For a non-list document, malformed entries, or an empty list.
    """
    if not isinstance(entries, list):
        raise ValueError("Catalog must be a JSON list")

    items = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError(f"Invalid catalog entry: {entry!r}")
        reference = entry.get("reference") or entry.get("url")
        if not reference:
            raise ValueError(f"Catalog entry has no reference: {entry!r}")
        items.append(CatalogItem(str(reference), str(entry.get("label") or reference)))

    if not items:
        raise ValueError("Catalog is empty")

    return tuple(items)


def load_catalog(path: str | None = None) -> tuple[CatalogItem, ...]:
    """Return the catalog from `path` / `CATALOG_FILE`, or the built-in one."""
    path = path or CATALOG_FILE
    if not path:
        return DEFAULT_CATALOG

    if not os.path.exists(path):
        raise ValueError(f"Catalog file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        return parse_catalog(json.load(f))
