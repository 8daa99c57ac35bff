"""
CSV export of sanitized records.

Columns follow the keys of the first record; later records missing a column
export an empty cell, and keys that only appear in later records are dropped.
"""
from typing import List, Dict, Any, Sequence

import pandas as pd

from sustainity.errors import ExportError
from sustainity.services.sanitizer import EXPORT_MODE, sanitize_records

EXPORT_ERROR_MESSAGE = "Error generating CSV file for download."


def export_csv(records: Sequence[Dict[str, Any]]) -> str:
    """
    Serialize records back to CSV text (header row first, comma-delimited).

    Args:
        records: Sanitized records, already filtered/sorted as they should appear

    Returns:
        Complete CSV text

    Raises:
        ExportError: Serialization failed; no partial text is returned
    """
    try:
        rows: List[Dict[str, Any]] = sanitize_records(records, EXPORT_MODE)
        columns = list(rows[0].keys()) if rows else []
        df = pd.DataFrame(rows, columns=columns)
        return df.to_csv(index=False, lineterminator="\n")
    except Exception as e:
        print(f"[EXPORT ERROR] {type(e).__name__}: {e}")
        raise ExportError(EXPORT_ERROR_MESSAGE) from e
