"""
Ingestion state machine for one consumer of a CSV source.

States: IDLE -> LOADING -> {READY, FETCH_FAILED, PARSE_FAILED}

Every new source selection starts a new generation. Results carry the
generation they were started under and are dropped when a newer selection
has superseded them or the consumer has been closed (last selection wins).
"""
import asyncio
from enum import Enum
from typing import Any, Callable, Dict, Optional

from sustainity.errors import FetchError, ParseError, SustainityError
from sustainity.models import Dataset
from sustainity.services import ingestion
from sustainity.services.sanitizer import TABLE_MODE, sanitize_records

PARSE_ERROR_MESSAGE = "Error parsing CSV file."


class IngestionState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FETCH_FAILED = "fetch_failed"
    PARSE_FAILED = "parse_failed"


# Dataset versions are unique across sessions so cached views never collide
_next_version = 0


def _new_version() -> int:
    global _next_version
    _next_version += 1
    return _next_version


def build_dataset(text: str, mode: str = TABLE_MODE) -> Dataset:
    """
    Parse and sanitize CSV text into a Dataset.

    Raises:
        ParseError: The parser reported row-level errors
    """
    parsed = ingestion.parse_csv(text)
    if parsed["errors"]:
        print(f"[INGESTION] CSV parse errors: {parsed['errors']}")
        raise ParseError(PARSE_ERROR_MESSAGE, row_errors=parsed["errors"])

    records = sanitize_records(parsed["rows"], mode)
    columns = list(records[0].keys()) if records else []
    return Dataset(version=_new_version(), columns=columns, records=tuple(records))


class IngestionSession:
    """Independent fetch+parse pipeline owned by one consumer (table or chart)."""

    def __init__(self, name: str):
        self.name = name
        self.state = IngestionState.IDLE
        self.dataset = Dataset()
        self.error: Optional[SustainityError] = None
        self.source: Optional[str] = None
        self.generation = 0
        self.closed = False

    def begin(self, source: str) -> int:
        """Start a new selection: clear prior result/error and return its token."""
        self.generation += 1
        self.source = source
        self.state = IngestionState.LOADING
        self.dataset = Dataset()
        self.error = None
        return self.generation

    def is_current(self, token: int) -> bool:
        return not self.closed and token == self.generation

    def commit(self, token: int, text: str) -> bool:
        """
        Apply fetched text under a generation token.

        Returns:
            False when the token is stale and nothing was applied
        """
        if not self.is_current(token):
            print(f"[SESSION] {self.name}: dropping stale result (generation {token})")
            return False
        try:
            dataset = build_dataset(text)
        except ParseError as e:
            self.state = IngestionState.PARSE_FAILED
            self.error = e
            return True
        self.dataset = dataset
        self.state = IngestionState.READY
        print(f"[SESSION] {self.name}: loaded {len(dataset)} rows, {len(dataset.columns)} columns")
        return True

    def fail(self, token: int, error: FetchError) -> bool:
        if not self.is_current(token):
            print(f"[SESSION] {self.name}: dropping stale error (generation {token})")
            return False
        self.state = IngestionState.FETCH_FAILED
        self.error = error
        print(f"[SESSION] {self.name}: fetch failed: {error.message}")
        return True

    async def ingest(self, source: str, reader: Callable[[str], str]) -> IngestionState:
        """
        Read a source and load it, unless a newer selection supersedes it meanwhile.

        Only the read suspends; it runs in a worker thread. There is no timeout
        or retry: failures are terminal for this selection.
        """
        token = self.begin(source)
        try:
            text = await asyncio.to_thread(reader, source)
        except FetchError as e:
            self.fail(token, e)
        except Exception as e:
            print(f"[SESSION] {self.name}: unexpected read error: {type(e).__name__}: {e}")
            self.fail(token, FetchError(f"Error reading source: {e}"))
        else:
            self.commit(token, text)
        return self.state

    def close(self):
        """Stop accepting results (consumer went away)."""
        self.closed = True

    @property
    def ready(self) -> bool:
        return self.state == IngestionState.READY

    def error_message(self) -> Optional[str]:
        return self.error.message if self.error else None

    def status(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "rows": len(self.dataset),
            "error": self.error_message(),
        }
