from __future__ import annotations

import logging
import threading
from typing import Optional

from sheetdash.core.dataset import RecordSet
from sheetdash.core.exceptions import SheetFetchError
from sheetdash.services.sheet_client import SheetClient

logger = logging.getLogger(__name__)


class DatasetManager:
    """
    Central service holding the current RecordSet.

    The first access loads lazily; refresh() replaces the records wholesale and
    bumps `version` so the UI can drop row ids that belonged to the old load.
    A failed refresh keeps the previous records and remembers the error.
    """

    def __init__(self, client: SheetClient):
        self._client = client
        self._records: Optional[RecordSet] = None
        self._last_error: Optional[str] = None
        self._lock = threading.Lock()
        self.version = 0

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    def is_loaded(self) -> bool:
        return self._records is not None

    def current(self) -> RecordSet:
        """Return the loaded records, fetching them on first use."""
        if self._records is not None:
            return self._records
        return self.refresh()

    def refresh(self) -> RecordSet:
        with self._lock:
            try:
                logger.info("Fetching sheet records", extra={"version": self.version + 1})
                records = self._client.load_records()
            except SheetFetchError as e:
                self._last_error = str(e)
                logger.error("Sheet fetch failed", extra={"error": str(e)})
                raise
            except Exception:
                self._last_error = "Unexpected error while loading the sheet"
                logger.exception("Unexpected error while loading the sheet")
                raise

            self._records = records
            self._last_error = None
            self.version += 1
            return records
