import asyncio
import io

import pytest
from fastapi import UploadFile

from sustainity.errors import ExportError, FetchError, ParseError, SelectionError
from sustainity.services.session import IngestionState
from sustainity.services.workspace import NO_SOURCE_MESSAGE, Workspace
from tests.conftest import FRUIT_CSV, FakeResponse


def _upload(name, content):
    return UploadFile(file=io.BytesIO(content), filename=name)


def test_scenario_fruit_dataset(static_dir):
    workspace = Workspace()
    asyncio.run(workspace.select_source("/2017PurchasePricesDec.csv"))

    assert workspace.table.state == IngestionState.READY
    assert workspace.rows() == [
        {"name": "Apple", "price": "1.5"},
        {"name": "Banana", "price": "abc"},
    ]
    chart = workspace.chart_data()
    assert chart.datasets[0].label == "price"
    assert chart.datasets[0].data == [1.5, None]

    workspace.set_filter("banana")
    assert [row["name"] for row in workspace.rows()] == ["Banana"]

    workspace.set_filter("")
    workspace.toggle_sort("price")
    assert [row["name"] for row in workspace.rows()] == ["Apple", "Banana"]
    workspace.toggle_sort("price")
    assert [row["name"] for row in workspace.rows()] == ["Banana", "Apple"]


def test_fetch_404_leaves_table_and_chart_empty(fake_get):
    workspace = Workspace()
    status = asyncio.run(workspace.select_source("https://example.com/missing.csv"))

    assert status["table"]["state"] == "fetch_failed"
    assert status["chart"]["state"] == "fetch_failed"
    assert "404" in status["table"]["error"]
    assert "404" in status["errors"]["fetch"]
    assert workspace.rows() == []
    assert workspace.chart_data() is None


def test_parse_failure_is_reported(static_dir):
    (static_dir / "broken.csv").write_text("a,b\n1,2,3\n")
    workspace = Workspace()
    status = asyncio.run(workspace.select_source("/broken.csv"))
    assert status["table"]["state"] == "parse_failed"
    assert status["errors"]["parse"] == "Error parsing CSV file."
    assert workspace.rows() == []


def test_upload_selects_blob_and_revokes_previous_one():
    workspace = Workspace()
    first = asyncio.run(workspace.select_upload(_upload("one.csv", b"a\n1\n")))
    assert first in workspace.blobs
    assert workspace.rows() == [{"a": "1"}]

    second = asyncio.run(workspace.select_upload(_upload("two.csv", b"a\n2\n")))
    assert first not in workspace.blobs
    assert second in workspace.blobs
    assert len(workspace.blobs) == 1
    assert workspace.rows() == [{"a": "2"}]


def test_rejected_upload_keeps_previous_source():
    workspace = Workspace()
    blob = asyncio.run(workspace.select_upload(_upload("one.csv", b"a\n1\n")))
    with pytest.raises(SelectionError):
        asyncio.run(workspace.select_upload(_upload("notes.txt", b"a\n1\n")))
    assert workspace.source == blob
    assert workspace.errors["selection"] == "Please upload a CSV file"


def test_new_selection_clears_all_banners(static_dir):
    workspace = Workspace()
    for category in workspace.errors:
        workspace.errors[category] = "stale"
    asyncio.run(workspace.select_source("/2017PurchasePricesDec.csv"))
    assert all(message is None for message in workspace.errors.values())


def test_export_without_source():
    workspace = Workspace()
    with pytest.raises(SelectionError) as excinfo:
        asyncio.run(workspace.export())
    assert excinfo.value.message == NO_SOURCE_MESSAGE
    assert workspace.errors["selection"] == NO_SOURCE_MESSAGE


def test_export_with_zero_rows(static_dir):
    (static_dir / "empty.csv").write_text("name,price\n")
    workspace = Workspace()
    asyncio.run(workspace.select_source("/empty.csv"))
    with pytest.raises(SelectionError) as excinfo:
        asyncio.run(workspace.export())
    assert excinfo.value.message == "Please upload a CSV file first."


def test_export_full_and_filtered(static_dir):
    workspace = Workspace()
    asyncio.run(workspace.select_source("/2017PurchasePricesDec.csv"))
    assert asyncio.run(workspace.export()) == FRUIT_CSV

    workspace.set_filter("apple")
    assert asyncio.run(workspace.export(filtered=True)) == "name,price\nApple,1.5\n"


def test_export_fetch_failure_sets_fetch_banner(static_dir):
    workspace = Workspace()
    asyncio.run(workspace.select_source("/2017PurchasePricesDec.csv"))
    (static_dir / "2017PurchasePricesDec.csv").unlink()
    with pytest.raises(FetchError) as excinfo:
        asyncio.run(workspace.export())
    assert excinfo.value.message == "Error fetching CSV file: HTTP error! status: 404"
    assert workspace.errors["fetch"] == excinfo.value.message
    # table state is untouched by the failed export
    assert len(workspace.rows()) == 2


def test_export_parse_failure_sets_parse_banner(static_dir):
    workspace = Workspace()
    asyncio.run(workspace.select_source("/2017PurchasePricesDec.csv"))
    (static_dir / "2017PurchasePricesDec.csv").write_text('a,b\n"1\n')
    with pytest.raises(ParseError):
        asyncio.run(workspace.export())
    assert workspace.errors["parse"] == "Error parsing CSV file."


def test_export_serialization_failure(static_dir, monkeypatch):
    def _broken(records):
        raise ExportError("Error generating CSV file for download.")

    monkeypatch.setattr("sustainity.services.workspace.export_csv", _broken)
    workspace = Workspace()
    asyncio.run(workspace.select_source("/2017PurchasePricesDec.csv"))
    with pytest.raises(ExportError):
        asyncio.run(workspace.export())
    assert workspace.errors["export"] == "Error generating CSV file for download."
    assert len(workspace.rows()) == 2


def test_export_from_url(fake_get):
    fake_get["https://example.com/data.csv"] = FakeResponse(200, FRUIT_CSV)
    workspace = Workspace()
    asyncio.run(workspace.select_source("https://example.com/data.csv"))
    assert asyncio.run(workspace.export()) == FRUIT_CSV


def test_close_revokes_current_blob():
    workspace = Workspace()
    blob = asyncio.run(workspace.select_upload(_upload("one.csv", b"a\n1\n")))
    workspace.close()
    assert blob not in workspace.blobs
    assert workspace.table.closed and workspace.chart.closed


def test_invalid_static_path_leaves_no_consumer_loading(static_dir):
    workspace = Workspace()
    status = asyncio.run(workspace.select_source("/a\x00b.csv"))
    assert workspace.table.state == IngestionState.FETCH_FAILED
    assert workspace.chart.state == IngestionState.FETCH_FAILED
    assert status["errors"]["fetch"].startswith("Error fetching CSV file: Invalid source path")
