from __future__ import annotations

import logging
from pathlib import Path
from typing import Mapping, Optional

import dash_bootstrap_components as dbc
from dash import Dash

from .config import AppConfig
from sheetdash.config.loader import load_settings
from sheetdash.core.exceptions import SheetFetchError
from sheetdash.services.dataset_service import DatasetManager
from sheetdash.services.error_report import ErrorReportExporter
from sheetdash.services.job_runner import JobRunner
from sheetdash.services.sheet_client import SheetClient
from sheetdash.services.storage import LocalFileSystemStorage
from sheetdash.ui.layout.build_layout import build_layout
from sheetdash.ui.callbacks.callbacks_data import register_data_callbacks
from sheetdash.ui.callbacks.callbacks_send import register_send_callbacks
from sheetdash.ui.callbacks.callbacks_table import register_table_callbacks

logger = logging.getLogger(__name__)


def create_dash_app(
    config_root: Path | str = Path("config"),
    environ: Optional[Mapping[str, str]] = None,
    sheet_client: Optional[SheetClient] = None,
) -> Dash:
    config_root = Path(config_root)

    # 1) Load Config (fails fast on missing secrets)
    settings = load_settings(config_root, environ)

    # 2) Initialize Service Layer
    client = sheet_client or SheetClient(settings.credentials, settings.global_config)
    dataset_manager = DatasetManager(client)
    try:
        dataset_manager.refresh()
    except SheetFetchError:
        # The UI shows the error and an empty table; Refresh retries
        logger.warning("Initial sheet load failed", extra={"error": dataset_manager.last_error})

    # 3) Batch + export services
    storage_backend = LocalFileSystemStorage(config_root / "exports")
    exporter = ErrorReportExporter(storage_backend)

    # 4) App Context
    ctx = AppConfig(
        settings=settings,
        dataset_manager=dataset_manager,
        job_runner=JobRunner(),
        exporter=exporter,
    )
    ctx.validate()

    assets_path = Path(__file__).parent / "assets"

    app = Dash(
        __name__,
        external_stylesheets=[dbc.themes.FLATLY],
        assets_folder=str(assets_path),
    )
    app.title = settings.global_config.ui_title

    # Layout is rebuilt per page load so the dataset version store starts current
    app.layout = lambda: build_layout(ctx)

    # Register callbacks
    register_table_callbacks(app, ctx)
    register_data_callbacks(app, ctx)
    register_send_callbacks(app, ctx)

    return app
