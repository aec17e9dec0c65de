from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

import httpx

from sheetdash.config.model import Credentials, GlobalConfig
from sheetdash.core.dataset import RecordSet
from sheetdash.core.exceptions import SheetFetchError

logger = logging.getLogger(__name__)


def select_data_rows(values: Sequence[Sequence[Any]], first_row: int = 3, stride: int = 2) -> List[Sequence[Any]]:
    """
    Keep the data rows of a sheet values grid.

    The sheet carries a header block before first_row and an interleaved
    artifact row after every data row, so only first_row, first_row + stride, ...
    are records.
    """
    return [row for index, row in enumerate(values) if index >= first_row and (index - first_row) % stride == 0]


class SheetClient:
    """
    Reads the configured tab through the spreadsheet values API and parses it
    into a RecordSet using the configured positional column mapping.
    """

    def __init__(
        self,
        credentials: Credentials,
        global_config: GlobalConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.credentials = credentials
        self.global_config = global_config
        self._transport = transport

    @property
    def values_url(self) -> str:
        cfg = self.global_config
        return (
            f"{cfg.sheets_api_base}/spreadsheets/{self.credentials.spreadsheet_id}"
            f"/values/{self.credentials.sheet_name}!{cfg.sheet_range}"
        )

    def fetch_values(self) -> List[List[Any]]:
        """GET the raw 2D values array."""
        try:
            with httpx.Client(timeout=self.global_config.request_timeout, transport=self._transport) as client:
                response = client.get(self.values_url, params={"key": self.credentials.sheets_api_key})
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            body = e.response.text[:200] if e.response.text else "No response body"
            raise SheetFetchError(
                f"Spreadsheet API returned {e.response.status_code}: {body}"
            ) from e
        except httpx.HTTPError as e:
            raise SheetFetchError(f"Spreadsheet API request failed: {e}") from e
        except ValueError as e:
            raise SheetFetchError("Spreadsheet API returned invalid JSON") from e

        if not isinstance(payload, dict):
            raise SheetFetchError("Spreadsheet API returned an unexpected payload")

        # An empty tab comes back without a "values" key at all
        values = payload.get("values", [])
        if not isinstance(values, list) or not all(isinstance(row, list) for row in values):
            raise SheetFetchError("Spreadsheet 'values' is not a 2D array")
        return values

    def load_records(self) -> RecordSet:
        values = self.fetch_values()
        cfg = self.global_config
        rows = select_data_rows(values, first_row=cfg.first_data_row, stride=cfg.row_stride)

        logger.info(
            "Sheet loaded",
            extra={
                "sheet_name": self.credentials.sheet_name,
                "n_values": len(values),
                "n_records": len(rows),
            },
        )
        return RecordSet.from_rows(rows, cfg.columns, date_format=cfg.date_format)
