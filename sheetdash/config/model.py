from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from sheetdash.core.columns import ColumnSpec, DEFAULT_COLUMNS


@dataclass(frozen=True)
class Credentials:
    """
    Secrets taken from the environment, never from global.json.
    """
    spreadsheet_id: str
    sheet_name: str
    sheets_api_key: str
    whatsapp_token: str
    phone_number_id: str

    def __repr__(self) -> str:
        return (
            f"Credentials(spreadsheet_id={self.spreadsheet_id!r}, sheet_name={self.sheet_name!r}, "
            f"phone_number_id={self.phone_number_id!r}, sheets_api_key=***, whatsapp_token=***)"
        )


@dataclass
class GlobalConfig:
    ui_title: str = "Leads Dashboard"
    subtitle: str = "Spreadsheet leads & WhatsApp outreach"
    columns: List[ColumnSpec] = field(default_factory=lambda: list(DEFAULT_COLUMNS))
    page_size: int = 10

    # Sheet layout: data rows start at first_data_row and repeat every row_stride rows
    sheet_range: str = "A1:Z"
    first_data_row: int = 3
    row_stride: int = 2
    date_format: Optional[str] = None

    # Messaging
    country_code: str = "91"
    language_code: str = "en"
    messaging_product: str = "whatsapp"

    sheets_api_base: str = "https://sheets.googleapis.com/v4"
    graph_api_base: str = "https://graph.facebook.com"
    graph_api_version: str = "v21.0"
    request_timeout: float = 30.0


@dataclass
class AppSettings:
    config_root: Path
    global_config: GlobalConfig
    credentials: Credentials
