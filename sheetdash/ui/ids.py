from __future__ import annotations

__all__ = ["IDs", "filter_id", "row_toggle_id", "sort_header_id"]


class IDs:
    class Store:
        TABLE_STATE = "table-state"
        DATASET_VERSION = "dataset-version"
        ACTIVE_JOB = "active-job-id"

    class Control:
        # Toolbar
        REFRESH_BTN = "refresh-btn"
        COLUMN_VISIBILITY = "column-visibility-checklist"
        LOAD_ALERT = "load-alert"

        # Table + pager
        TABLE_CONTAINER = "records-table-container"
        PAGE_PREV_BTN = "page-prev-btn"
        PAGE_NEXT_BTN = "page-next-btn"
        PAGE_LABEL = "page-label"
        SELECTION_SUMMARY = "selection-summary"

        # Send dialog
        OPEN_SEND_BTN = "open-send-btn"
        SEND_MODAL = "send-modal"
        HEADER_KIND = "send-header-kind"
        HEADER_TEXT = "send-header-text"
        HEADER_TEXT_CONTAINER = "send-header-text-container"
        HEADER_IMAGE = "send-header-image"
        HEADER_IMAGE_CONTAINER = "send-header-image-container"
        HEADER_IMAGE_NAME = "send-header-image-name"
        TEXT1 = "send-text1"
        TEXT2 = "send-text2"
        TEXT2_CONTAINER = "send-text2-container"
        TEXT3 = "send-text3"
        TEXT3_CONTAINER = "send-text3-container"
        FORM_ERRORS = "send-form-errors"
        SEND_SUBMIT_BTN = "send-submit-btn"
        MESSAGE_PREVIEW = "send-message-preview"

        # Progress overlay
        PROGRESS_MODAL = "progress-modal"
        PROGRESS_BAR = "progress-bar"
        PROGRESS_TEXT = "progress-text"
        PROGRESS_ERRORS = "progress-errors"
        PROGRESS_INTERVAL = "progress-interval"
        PROGRESS_CANCEL_BTN = "progress-cancel-btn"
        BATCH_RESULT = "batch-result"
        DOWNLOAD_ERRORS = "download-errors"

    class Pattern:
        # pattern-matching "type" strings
        FILTER_SELECT = "filter-select"
        FILTER_MIN = "filter-min"
        FILTER_MAX = "filter-max"
        FILTER_DATE = "filter-date"
        FILTER_TEXT = "filter-text"
        SORT_HEADER = "sort-header"
        ROW_TOGGLE = "row-toggle"
        PAGE_TOGGLE = "page-toggle"


def filter_id(kind: str, column: str) -> dict:
    return {"type": kind, "column": column}


def sort_header_id(column: str) -> dict:
    return {"type": IDs.Pattern.SORT_HEADER, "column": column}


def row_toggle_id(row_id: str) -> dict:
    return {"type": IDs.Pattern.ROW_TOGGLE, "index": row_id}
