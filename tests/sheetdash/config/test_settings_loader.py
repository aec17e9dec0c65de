import json
from pathlib import Path

import pytest

from sheetdash.config.loader import (
    ENV_PHONE_NUMBER_ID,
    ENV_SHEET_NAME,
    ENV_SHEETS_API_KEY,
    ENV_SPREADSHEET_ID,
    ENV_WHATSAPP_TOKEN,
    REQUIRED_ENV,
    load_credentials,
    load_global_config,
    load_settings,
)
from sheetdash.core.exceptions import ConfigError

ENV = {
    ENV_SPREADSHEET_ID: "sheet-123",
    ENV_SHEET_NAME: "Leads",
    ENV_SHEETS_API_KEY: "api-key",
    ENV_WHATSAPP_TOKEN: "wa-token",
    ENV_PHONE_NUMBER_ID: "555000",
}


def _write_global(root: Path, data: dict) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    (root / "global.json").write_text(json.dumps(data))
    return root


def test_load_global_config_reads_values_and_defaults(tmp_path):
    root = _write_global(
        tmp_path / "config",
        {"ui_title": "Test Leads", "schema": "compact", "page_size": 25, "country_code": 44},
    )

    cfg = load_global_config(root)

    assert cfg.ui_title == "Test Leads"
    assert cfg.page_size == 25
    assert cfg.country_code == "44"
    assert "no_of_seats" not in [c.field for c in cfg.columns]
    # defaults
    assert cfg.first_data_row == 3
    assert cfg.row_stride == 2
    assert cfg.language_code == "en"


def test_load_global_config_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_global_config(tmp_path)


def test_load_global_config_invalid_json(tmp_path):
    (tmp_path / "global.json").write_text("{not json")

    with pytest.raises(ConfigError):
        load_global_config(tmp_path)


@pytest.mark.parametrize(
    "data",
    [
        {"schema": "unknown"},
        {"page_size": 0},
        {"row_stride": 0},
        {"columns": [{"field": "name"}]},
    ],
)
def test_load_global_config_rejects_bad_values(tmp_path, data):
    root = _write_global(tmp_path, data)

    with pytest.raises(ConfigError):
        load_global_config(root)


def test_load_credentials_reports_every_missing_variable():
    env = {ENV_SPREADSHEET_ID: "sheet-123", ENV_SHEET_NAME: "  "}

    with pytest.raises(ConfigError) as exc_info:
        load_credentials(env)

    message = str(exc_info.value)
    for name in REQUIRED_ENV[1:]:
        assert name in message
    assert ENV_SPREADSHEET_ID not in message


def test_credentials_repr_hides_secrets():
    creds = load_credentials(ENV)

    assert creds.whatsapp_token == "wa-token"
    assert "wa-token" not in repr(creds)
    assert "api-key" not in repr(creds)


def test_load_settings(tmp_path):
    root = _write_global(tmp_path, {})

    settings = load_settings(root, ENV)

    assert settings.config_root == root
    assert settings.credentials.spreadsheet_id == "sheet-123"
    assert settings.global_config.ui_title == "Leads Dashboard"


def test_shipped_global_config_reads_day_first_dates():
    config_root = Path(__file__).resolve().parents[3] / "config"

    cfg = load_global_config(config_root)

    # the deployed sheet writes dd/mm/yyyy; inferred parsing would read it month-first
    assert cfg.date_format == "%d/%m/%Y"
