"""
Top-level session tying the pipeline together.

The workspace owns:
- the currently selected source (default dataset, URL or uploaded blob)
- two independent consumers, table and chart, each with its own dataset
- the table's filter text and sort state
- the four error banners (selection, fetch, parse, export)

Every new selection or export clears all banners before it runs.
"""
import asyncio
from typing import Any, Dict, List, Optional

from fastapi import UploadFile

from sustainity.errors import (
    ERROR_CATEGORIES, ExportError, FetchError, ParseError, SelectionError, SustainityError,
)
from sustainity.models import ChartData, SortState
from sustainity.services import ingestion
from sustainity.services.blobs import BlobStore, is_blob
from sustainity.services.exporter import export_csv
from sustainity.services.sanitizer import EXPORT_MODE
from sustainity.services.session import IngestionSession, build_dataset
from sustainity.services.summary import summarize
from sustainity.services.table_view import TableView, view

NO_SOURCE_MESSAGE = "Please upload a CSV file first."


class Workspace:
    def __init__(self, blobs: Optional[BlobStore] = None):
        self.blobs = blobs if blobs is not None else BlobStore()
        self.source: Optional[str] = None
        self.table = IngestionSession("table")
        self.chart = IngestionSession("chart")
        self.table_view = TableView()
        self.filter = ""
        self.sort = SortState()
        self.errors: Dict[str, Optional[str]] = {category: None for category in ERROR_CATEGORIES}
        self._chart_version: Optional[int] = None
        self._chart_data: Optional[ChartData] = None

    # ------------------------------------------------------------------
    # Error banners
    # ------------------------------------------------------------------

    def clear_errors(self):
        for category in self.errors:
            self.errors[category] = None

    def _record(self, error: SustainityError) -> SustainityError:
        self.errors[error.category] = error.message
        return error

    # ------------------------------------------------------------------
    # Source selection
    # ------------------------------------------------------------------

    def _read(self, source: str) -> str:
        return ingestion.read_source(source, self.blobs)

    async def select_source(self, source: str) -> Dict[str, Any]:
        """
        Select a new CSV source and load it into both consumers.

        The previous upload blob is revoked once it is no longer the source.
        """
        self.clear_errors()
        previous = self.source
        self.source = source
        if previous != source and is_blob(previous):
            self.blobs.revoke(previous)

        print(f"[INGESTION] Loading source: {source}")
        await asyncio.gather(
            self.table.ingest(source, self._read),
            self.chart.ingest(source, self._read),
        )
        # A newer selection may have replaced this one while it was loading
        if self.source == source and self.table.error is not None:
            self._record(self._banner_error(self.table.error))
        return self.status()

    @staticmethod
    def _banner_error(error: SustainityError) -> SustainityError:
        if isinstance(error, FetchError):
            return FetchError(f"Error fetching CSV file: {error.message}", status=error.status)
        return error

    async def select_upload(self, file: UploadFile) -> str:
        """
        Validate an uploaded file, keep it as a blob and select it.

        Returns:
            The blob source id

        Raises:
            SelectionError: Missing file, non-CSV name or unreadable content
        """
        self.clear_errors()
        try:
            text = ingestion.read_upload(file)
        except SelectionError as e:
            print(f"[UPLOAD] Rejected: {e.message}")
            raise self._record(e)

        blob_id = self.blobs.create(text)
        print(f"[UPLOAD] Stored {file.filename} as {blob_id} ({len(text)} chars)")
        await self.select_source(blob_id)
        return blob_id

    # ------------------------------------------------------------------
    # Table
    # ------------------------------------------------------------------

    def set_filter(self, text: Optional[str]):
        self.filter = text or ""

    def set_sort(self, column: Optional[str], ascending: bool = True):
        self.sort = SortState(column=column or None, ascending=ascending)

    def toggle_sort(self, column: str) -> SortState:
        self.sort = self.sort.toggle(column)
        return self.sort

    def columns(self) -> List[str]:
        return list(self.table.dataset.columns)

    def rows(self) -> List[Dict[str, Any]]:
        """Current filtered/sorted rows; empty unless the table consumer is ready."""
        if not self.table.ready:
            return []
        return self.table_view.rows(self.table.dataset, self.filter, self.sort)

    # ------------------------------------------------------------------
    # Chart
    # ------------------------------------------------------------------

    def chart_data(self) -> Optional[ChartData]:
        if not self.chart.ready:
            return None
        dataset = self.chart.dataset
        if dataset.version != self._chart_version:
            self._chart_data = summarize(dataset.records)
            self._chart_version = dataset.version
        return self._chart_data

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    async def export(self, filtered: bool = False) -> str:
        """
        Re-read the current source and serialize it as CSV.

        Args:
            filtered: Apply the table's current filter and sort before export

        Returns:
            CSV text

        Raises:
            SelectionError: No source selected, or no rows to export
            FetchError: Source could not be read
            ParseError: Source has malformed rows
            ExportError: Serialization failed
        """
        self.clear_errors()
        if not self.source:
            raise self._record(SelectionError(NO_SOURCE_MESSAGE))

        source = self.source
        try:
            text = await asyncio.to_thread(self._read, source)
        except FetchError as e:
            print(f"[EXPORT] Error fetching CSV: {e.message}")
            raise self._record(self._banner_error(e))

        try:
            dataset = build_dataset(text, EXPORT_MODE)
        except ParseError as e:
            raise self._record(e)

        records = view(dataset, self.filter, self.sort) if filtered else list(dataset.records)
        if not records:
            raise self._record(SelectionError(NO_SOURCE_MESSAGE))

        try:
            csv_text = export_csv(records)
        except ExportError as e:
            raise self._record(e)

        print(f"[EXPORT] Exported {len(records)} rows from {source}")
        return csv_text

    # ------------------------------------------------------------------
    # Status / lifecycle
    # ------------------------------------------------------------------

    def status(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "table": self.table.status(),
            "chart": self.chart.status(),
            "errors": dict(self.errors),
        }

    def close(self):
        self.table.close()
        self.chart.close()
        if is_blob(self.source):
            self.blobs.revoke(self.source)