"""Save and load the whole page collection under a single storage key.

Failures never escape this module: a missing or corrupt blob loads as an
empty collection, and a failed save is logged and reported through
``degraded`` while the in-memory pages stay authoritative.
"""

from collections.abc import Sequence

from pydantic import ValidationError

from blocknotes.dependencies import (
    StorageClient,
    StorageError,
    StorageNotFoundError,
    logger,
)
from blocknotes.pages.models import Page, PageCollection


class PersistenceGateway:
    """Full-collection JSON persistence on top of a :class:`StorageClient`."""

    def __init__(self, storage: StorageClient, key: str = "pages") -> None:
        self.storage = storage
        self.key = key
        #: True after the last save or load failed; cleared by the next success
        self.degraded = False

    def save(self, pages: Sequence[Page]) -> bool:
        """Serialize every page and write it under the collection key.

        Returns:
            True if the write went through, False if it failed (logged)
        """
        try:
            payload = PageCollection(pages=list(pages)).model_dump_json()
            self.storage.write(self.key, payload)
        except (StorageError, OSError, ValueError) as e:
            self.degraded = True
            logger.error(
                "pages_save_failed",
                extra={"key": self.key, "pages": len(pages), "error": str(e)},
                exc_info=True,
            )
            return False

        self.degraded = False
        logger.debug("pages_saved", extra={"key": self.key, "pages": len(pages)})
        return True

    def load(self) -> list[Page]:
        """Read the collection back, or an empty list if there is none."""
        try:
            raw = self.storage.read(self.key)
        except StorageNotFoundError:
            logger.info("pages_blob_missing", extra={"key": self.key})
            return []
        except (StorageError, OSError) as e:
            self.degraded = True
            logger.error(
                "pages_load_failed", extra={"key": self.key, "error": str(e)}, exc_info=True
            )
            return []

        try:
            pages = PageCollection.model_validate_json(raw).pages
        except ValidationError as e:
            self.degraded = True
            logger.warning(
                "pages_blob_corrupt", extra={"key": self.key, "errors": e.error_count()}
            )
            return []

        self.degraded = False
        logger.info("pages_loaded", extra={"key": self.key, "pages": len(pages)})
        return pages
