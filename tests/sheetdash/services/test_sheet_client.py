from __future__ import annotations

import httpx
import pytest

from sheetdash.config.model import Credentials, GlobalConfig
from sheetdash.core.columns import ColumnSpec, NUMERIC_RANGE
from sheetdash.core.exceptions import SheetFetchError
from sheetdash.services.sheet_client import SheetClient, select_data_rows

CREDS = Credentials(
    spreadsheet_id="sheet-123",
    sheet_name="Leads",
    sheets_api_key="api-key",
    whatsapp_token="wa-token",
    phone_number_id="555000",
)

COLUMNS = [
    ColumnSpec("name", "Name"),
    ColumnSpec("number", "Number"),
    ColumnSpec("seats", "Seats", NUMERIC_RANGE),
]


def _client(handler) -> SheetClient:
    cfg = GlobalConfig(columns=COLUMNS)
    return SheetClient(CREDS, cfg, transport=httpx.MockTransport(handler))


def test_select_data_rows_skips_headers_and_spacer_rows():
    values = [["title"], ["header"], [], ["r3"], ["spacer"], ["r5"], ["spacer"], ["r7"]]

    assert select_data_rows(values) == [["r3"], ["r5"], ["r7"]]
    assert select_data_rows(values, first_row=1, stride=3) == [["header"], ["spacer"], ["r7"]]
    assert select_data_rows(values[:3]) == []


def test_load_records_parses_selected_rows():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        return httpx.Response(
            200,
            json={
                "values": [
                    ["Leads"],
                    ["Name", "Number", "Seats"],
                    [],
                    ["Asha", "900001", "12"],
                    [],
                    ["Ben", "900002"],
                ]
            },
        )

    records = _client(handler).load_records()

    assert seen["url"].params["key"] == "api-key"
    assert "/spreadsheets/sheet-123/values/" in seen["url"].path
    assert list(records.row_ids) == ["0", "1"]
    assert records.values("name").tolist() == ["Asha", "Ben"]
    assert records.values("seats").tolist() == ["12", ""]


def test_missing_values_key_means_empty_sheet():
    records = _client(lambda request: httpx.Response(200, json={"range": "Leads!A1:Z"})).load_records()

    assert len(records) == 0


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(403, json={"error": {"message": "API key not valid"}}),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json={"values": "nope"}),
        httpx.Response(200, json=[["a"]]),
    ],
)
def test_bad_responses_raise_sheet_fetch_error(response):
    with pytest.raises(SheetFetchError):
        _client(lambda request: response).fetch_values()


def test_transport_errors_raise_sheet_fetch_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(SheetFetchError):
        _client(handler).fetch_values()
