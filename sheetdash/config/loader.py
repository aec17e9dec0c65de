from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from sheetdash.config.model import AppSettings, Credentials, GlobalConfig
from sheetdash.core.columns import resolve_columns
from sheetdash.core.exceptions import ConfigError, SchemaError

logger = logging.getLogger(__name__)

ENV_SPREADSHEET_ID = "SHEETDASH_SPREADSHEET_ID"
ENV_SHEET_NAME = "SHEETDASH_SHEET_NAME"
ENV_SHEETS_API_KEY = "SHEETDASH_SHEETS_API_KEY"
ENV_WHATSAPP_TOKEN = "SHEETDASH_WHATSAPP_TOKEN"
ENV_PHONE_NUMBER_ID = "SHEETDASH_WHATSAPP_PHONE_NUMBER_ID"

REQUIRED_ENV = (
    ENV_SPREADSHEET_ID,
    ENV_SHEET_NAME,
    ENV_SHEETS_API_KEY,
    ENV_WHATSAPP_TOKEN,
    ENV_PHONE_NUMBER_ID,
)


def load_global_config(root: Path) -> GlobalConfig:
    """
    Load non-secret settings from <root>/global.json.
    """
    logger.info("Loading global config", extra={"config_root": str(root)})

    global_path = Path(root) / "global.json"
    if not global_path.is_file():
        raise ConfigError(f"File not found at {global_path}")

    try:
        with global_path.open() as f:
            raw: Dict[str, Any] = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {global_path}: {e}") from e

    try:
        columns = resolve_columns(raw.get("schema"), raw.get("columns"))
    except SchemaError as e:
        raise ConfigError(str(e)) from e

    defaults = GlobalConfig()
    page_size = int(raw.get("page_size", defaults.page_size))
    if page_size < 1:
        raise ConfigError(f"page_size must be >= 1, got {page_size}")

    row_stride = int(raw.get("row_stride", defaults.row_stride))
    if row_stride < 1:
        raise ConfigError(f"row_stride must be >= 1, got {row_stride}")

    return GlobalConfig(
        ui_title=raw.get("ui_title", defaults.ui_title),
        subtitle=raw.get("subtitle", defaults.subtitle),
        columns=columns,
        page_size=page_size,
        sheet_range=raw.get("sheet_range", defaults.sheet_range),
        first_data_row=int(raw.get("first_data_row", defaults.first_data_row)),
        row_stride=row_stride,
        date_format=raw.get("date_format", defaults.date_format),
        country_code=str(raw.get("country_code", defaults.country_code)),
        language_code=raw.get("language_code", defaults.language_code),
        messaging_product=raw.get("messaging_product", defaults.messaging_product),
        sheets_api_base=raw.get("sheets_api_base", defaults.sheets_api_base).rstrip("/"),
        graph_api_base=raw.get("graph_api_base", defaults.graph_api_base).rstrip("/"),
        graph_api_version=raw.get("graph_api_version", defaults.graph_api_version),
        request_timeout=float(raw.get("request_timeout", defaults.request_timeout)),
    )


def load_credentials(environ: Optional[Mapping[str, str]] = None) -> Credentials:
    """
    Read secrets from the environment. Every missing variable is reported at once.
    """
    env = os.environ if environ is None else environ
    missing = [name for name in REQUIRED_ENV if not (env.get(name) or "").strip()]
    if missing:
        raise ConfigError(
            "Missing required environment variables: " + ", ".join(missing)
        )

    return Credentials(
        spreadsheet_id=env[ENV_SPREADSHEET_ID].strip(),
        sheet_name=env[ENV_SHEET_NAME].strip(),
        sheets_api_key=env[ENV_SHEETS_API_KEY].strip(),
        whatsapp_token=env[ENV_WHATSAPP_TOKEN].strip(),
        phone_number_id=env[ENV_PHONE_NUMBER_ID].strip(),
    )


def load_settings(root: Path | str, environ: Optional[Mapping[str, str]] = None) -> AppSettings:
    root = Path(root)
    global_config = load_global_config(root)
    credentials = load_credentials(environ)

    logger.info(
        "Settings loaded",
        extra={
            "config_root": str(root),
            "n_columns": len(global_config.columns),
            "sheet_name": credentials.sheet_name,
        },
    )
    return AppSettings(config_root=root, global_config=global_config, credentials=credentials)
