from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from sheetdash.core.exceptions import MediaUploadError, MessagingError
from sheetdash.services.storage import StorageBackend

logger = logging.getLogger(__name__)

ERROR_REPORT_FILENAME = "errors.json"


@dataclass(frozen=True)
class ErrorRecord:
    """One failed target of a batch: the identifier plus the serialised error."""
    id: str
    error: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "error": self.error}


def serialize_error(exc: BaseException) -> Dict[str, Any]:
    """
    JSON-safe description of a per-item failure.

    The dispatcher doesn't track which phase failed, so it is recorded here.
    """
    data: Dict[str, Any] = {"type": type(exc).__name__, "message": str(exc)}
    if isinstance(exc, MessagingError):
        data["phase"] = "upload" if isinstance(exc, MediaUploadError) else "send"
        if exc.status_code is not None:
            data["status_code"] = exc.status_code
        if exc.response is not None:
            data["response"] = exc.response
    return data


def errors_to_json(errors: Sequence[ErrorRecord]) -> str:
    """Pretty-printed report; the same errors always give the same text."""
    return json.dumps([e.to_dict() for e in errors], indent=2, ensure_ascii=False, default=str)


class ErrorReportExporter:
    """
    Serialises a batch's errors and keeps a copy under <job_id>/errors.json in storage.
    """

    def __init__(self, storage: Optional[StorageBackend] = None):
        self.storage = storage

    def export(self, job_id: str, errors: List[ErrorRecord]) -> Optional[str]:
        if not errors:
            logger.info("Batch finished without errors; no report written", extra={"job_id": job_id})
            return None

        text = errors_to_json(errors)
        if self.storage is not None:
            try:
                self.storage.write_bytes(f"{job_id}/{ERROR_REPORT_FILENAME}", text.encode("utf-8"))
            except OSError:
                logger.exception("Failed to persist error report %s", job_id)

        logger.info("Error report exported", extra={"job_id": job_id, "n_errors": len(errors)})
        return text
