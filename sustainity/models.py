"""
Pydantic models for data structures used throughout the application.

These models define the schema for:
- The immutable dataset derived from one CSV source
- Sort state for the table view
- Chart series produced by the numeric summary
- API request/response models
"""
from typing import List, Optional, Dict, Any, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Dataset(BaseModel):
    """
    Sanitized records of one CSV source.

    Replaced wholesale whenever a new source is selected, never mutated.
    `version` identifies the dataset for cached derivations.
    """
    model_config = ConfigDict(frozen=True)

    version: int = 0
    columns: List[str] = Field(default_factory=list)
    records: Tuple[Dict[str, Any], ...] = ()

    def __len__(self) -> int:
        return len(self.records)


class SortState(BaseModel):
    """At most one active sort column, with its direction."""
    model_config = ConfigDict(frozen=True)

    column: Optional[str] = None
    ascending: bool = True

    def toggle(self, column: str) -> "SortState":
        """Flip direction on the active column, otherwise sort the new column ascending."""
        if column == self.column:
            return SortState(column=column, ascending=not self.ascending)
        return SortState(column=column, ascending=True)


class ChartSeries(BaseModel):
    """One bar series for a numeric column, aligned positionally with the rows."""
    label: str
    data: List[Optional[float]]
    background_color: str


class ChartData(BaseModel):
    labels: List[str]
    datasets: List[ChartSeries]


# ============================================================================
# API Request/Response Models
# ============================================================================

class SourceRequest(BaseModel):
    source: str

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("source is required and cannot be empty")
        return v.strip()


class SortRequest(BaseModel):
    column: str

    @field_validator("column")
    @classmethod
    def validate_column(cls, v: str) -> str:
        if not v:
            raise ValueError("column is required")
        return v


class UploadResponse(BaseModel):
    source: str
    filename: str


class TableResponse(BaseModel):
    state: str
    columns: List[str]
    rows: List[Dict[str, Any]]
    total_rows: int
    filter: str = ""
    sort: SortState


class ChartResponse(BaseModel):
    state: str
    chart: Optional[ChartData] = None
    message: Optional[str] = None


class ConsumerStatus(BaseModel):
    """Ingestion status of one consumer (table or chart)."""
    state: str
    rows: int
    error: Optional[str] = None


class StatusResponse(BaseModel):
    source: Optional[str] = None
    table: ConsumerStatus
    chart: ConsumerStatus
    errors: Dict[str, Optional[str]]
