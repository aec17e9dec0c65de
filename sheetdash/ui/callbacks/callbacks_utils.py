from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sheetdash.core.dataset import RecordSet
from sheetdash.core.table_engine import TableEngine
from sheetdash.core.table_state import TableState

if TYPE_CHECKING:
    from sheetdash.ui.config import AppConfig

logger = logging.getLogger(__name__)


def safe_table_state(data: object) -> TableState:
    if not isinstance(data, dict):
        return TableState()
    try:
        return TableState.from_dict(data)
    except Exception:
        logger.exception("Invalid table-state: %r", data)
        return TableState()


def current_records(ctx: AppConfig) -> RecordSet:
    """The loaded records, or an empty set with the configured columns if the sheet never loaded."""
    manager = ctx.dataset_manager
    if manager is None or not manager.is_loaded():
        return RecordSet.empty(ctx.global_config.columns)
    return manager.current()


def engine_from_store(ctx: AppConfig, data: object) -> TableEngine:
    return TableEngine(
        current_records(ctx),
        safe_table_state(data),
        page_size=ctx.global_config.page_size,
    )


def values_by_column(inputs: List[Dict[str, Any]]) -> Dict[str, Any]:
    """{column: value} from one pattern-matching entry of dash.ctx.inputs_list / states_list."""
    return {item["id"]["column"]: item.get("value") for item in inputs}
