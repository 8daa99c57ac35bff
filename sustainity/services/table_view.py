"""
Filtered and sorted table view over a dataset.

Filtering keeps records where any cell contains the filter text
(case-insensitive). Sorting orders records by one column:
- missing values first when ascending, last when descending
- numbers (and numeric strings) compare numerically
- dates compare by timestamp, falling back to text when the timestamp is invalid
- everything else compares as locale-aware text

Derived views are cached and only recomputed when the dataset version, the
filter text or the sort state changes.
"""
import locale
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sustainity import config
from sustainity.models import Dataset, SortState
from sustainity.services.sanitizer import display_text, numeric_value

Record = Dict[str, Any]

# Key groups: present values of different kinds never compare directly
_NUMERIC, _TEMPORAL, _TEXT = 0, 1, 2


# ============================================================================
# Filtering
# ============================================================================

def matches(record: Record, needle: str) -> bool:
    """True when any value of the record contains the lowercased needle."""
    return any(needle in display_text(value).lower() for value in record.values())


def filter_records(records: Sequence[Record], text: str) -> List[Record]:
    if not text:
        return list(records)
    needle = text.lower()
    return [record for record in records if matches(record, needle)]


# ============================================================================
# Sorting
# ============================================================================

def _timestamp(value: date) -> Optional[float]:
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    try:
        return value.timestamp()
    except (ValueError, OverflowError, OSError):
        # pandas NaT and out-of-range datetimes have no usable timestamp
        return None


_collation: Optional[bool] = None


def _collation_enabled() -> bool:
    """
    Load the collation locale once; report whether it really collates.

    The "C"/"POSIX" locales order by code point, which puts every uppercase
    letter before any lowercase one, so they count as no collation.
    """
    global _collation
    if _collation is None:
        try:
            name = locale.setlocale(locale.LC_COLLATE, config.SORT_LOCALE)
        except locale.Error:
            name = locale.setlocale(locale.LC_COLLATE)
        base = (name or "C").split(".")[0].upper()
        _collation = base not in ("C", "POSIX")
    return _collation


def _text_key(value: Any) -> Tuple[str, str]:
    text = display_text(value)
    if _collation_enabled():
        try:
            return locale.strxfrm(text), text
        except ValueError:
            # strxfrm rejects embedded NUL characters
            pass
    return text.casefold(), text


def sort_key(value: Any) -> Tuple[int, Any]:
    """
    Ordering key for a present (non-None) cell value.

    Returns:
        (group, comparable) where group orders numbers before dates before text
    """
    number = numeric_value(value)
    if number is not None and number == number:
        return _NUMERIC, number
    if isinstance(value, date):
        stamp = _timestamp(value)
        if stamp is not None:
            return _TEMPORAL, stamp
    return _TEXT, _text_key(value)


def sort_records(records: Sequence[Record], sort: SortState) -> List[Record]:
    """
    Order records by the sort column.

    Python's sort is stable, so ties keep source order and flipping the
    direction reverses exactly the non-tied order.
    """
    if not sort.column:
        return list(records)

    column = sort.column
    missing = [record for record in records if record.get(column) is None]
    present = [record for record in records if record.get(column) is not None]
    present.sort(key=lambda record: sort_key(record[column]), reverse=not sort.ascending)

    if sort.ascending:
        return missing + present
    return present + missing


def view(dataset: Dataset, filter_text: str = "", sort: Optional[SortState] = None) -> List[Record]:
    """Filter then sort the dataset for display."""
    rows = filter_records(dataset.records, filter_text)
    return sort_records(rows, sort or SortState())


# ============================================================================
# Cached derivation
# ============================================================================

class TableView:
    """
    Memoized table derivation.

    The filtered rows are cached on (dataset version, filter) and the sorted
    rows on (dataset version, filter, sort column, direction), so changing only
    the sort does not re-run the filter.
    """

    def __init__(self):
        self._filter_key: Optional[Tuple[int, str]] = None
        self._filtered: List[Record] = []
        self._sort_key: Optional[Tuple[int, str, Optional[str], bool]] = None
        self._sorted: List[Record] = []
        self.recomputations = 0

    def filtered(self, dataset: Dataset, filter_text: str) -> List[Record]:
        key = (dataset.version, filter_text)
        if key != self._filter_key:
            self._filtered = filter_records(dataset.records, filter_text)
            self._filter_key = key
            self._sort_key = None
        return self._filtered

    def rows(self, dataset: Dataset, filter_text: str, sort: SortState) -> List[Record]:
        filtered = self.filtered(dataset, filter_text)
        key = (dataset.version, filter_text, sort.column, sort.ascending)
        if key != self._sort_key:
            self._sorted = sort_records(filtered, sort)
            self._sort_key = key
            self.recomputations += 1
        return list(self._sorted)

    def invalidate(self):
        self._filter_key = None
        self._sort_key = None
        self._filtered = []
        self._sorted = []
