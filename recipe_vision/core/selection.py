"""Selection state over the image catalog.

Tracks which catalog item is active and the image-load error shown next to it.
Changing the selection always clears that error. Selection is independent of
any in-flight submission: the orchestrator reads the reference once, at submit
time, so reselecting never cancels or restarts a running request.
"""

import logging
from typing import Sequence

from recipe_vision.core.catalog import CatalogItem
from recipe_vision.core.errors import UnknownReferenceError


logger = logging.getLogger(__name__)

LOAD_ERROR_TEMPLATE = "Failed to load image. Please check the path: {reference}"


class SelectionState:
    """Active catalog reference plus its display error.

    Args:
        catalog: Non-empty sequence of catalog items; the first is selected.
        strict: When true, `select` rejects references not in the catalog.
    """

    def __init__(self, catalog: Sequence[CatalogItem], strict: bool = False) -> None:
        if not catalog:
            raise ValueError("Catalog must contain at least one item")
        self._catalog = tuple(catalog)
        self._strict = strict
        self._selected = self._catalog[0].reference
        self._load_error: str | None = None

    @property
    def catalog(self) -> tuple[CatalogItem, ...]:
        return self._catalog

    @property
    def selected(self) -> str:
        return self._selected

    @property
    def selected_item(self) -> CatalogItem | None:
        for item in self._catalog:
            if item.reference == self._selected:
                return item
        return None

    @property
    def load_error(self) -> str | None:
        return self._load_error

    def contains(self, reference: str) -> bool:
        return any(item.reference == reference for item in self._catalog)

    def select(self, reference: str) -> None:
        """Make `reference` the active selection and clear the load error.

        Raises:
            UnknownReferenceError: In strict mode, for references outside the
                catalog. The current selection is left untouched.
        """
        if self._strict and not self.contains(reference):
            raise UnknownReferenceError(f"Unknown catalog reference: {reference}")

        logger.debug("Selected %s", reference)
        self._selected = reference
        self._load_error = None

    def report_load_error(self) -> None:
        """Record that the active image failed to render."""
        self._load_error = LOAD_ERROR_TEMPLATE.format(reference=self._selected)

    def report_load_success(self) -> None:
        self._load_error = None
