"""
Numeric column summary for the bar chart.

Finds the columns whose value in the FIRST record is numeric (a number, or a
string that parses fully as a number) and builds one series per column,
aligned positionally with the records. Later non-numeric values do not
disqualify a column; they become gaps (None) in its series.
"""
from typing import List, Dict, Any, Optional, Sequence

import pandas as pd

from sustainity.config import chart_color
from sustainity.models import ChartData, ChartSeries
from sustainity.services.sanitizer import CHART_MODE, sanitize_records, numeric_value


def numeric_columns(first: Dict[str, Any]) -> List[str]:
    """
    Classify columns as numeric from the first record only.

    Args:
        first: First sanitized record of the dataset

    Returns:
        Column names, in record order, whose first value is non-null and numeric
    """
    return [
        key for key, value in first.items()
        if value is not None and numeric_value(value) is not None
    ]


def _point(value: Any) -> Optional[float]:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return None
    number = numeric_value(value)
    if number is None or pd.isna(number):
        return None
    return float(number)


def row_labels(count: int) -> List[str]:
    return [f"Row {i + 1}" for i in range(count)]


def summarize(records: Sequence[Dict[str, Any]]) -> Optional[ChartData]:
    """
    Build chart series for the numeric columns of a dataset.

    Records are re-sanitized in chart mode, so leaked UI elements become gaps
    rather than placeholder text.

    Args:
        records: Sanitized records in display order

    Returns:
        ChartData with one series per numeric column, or None when the dataset
        is empty or has no numeric column
    """
    if not records:
        return None

    rows = sanitize_records(records, CHART_MODE)
    keys = numeric_columns(rows[0])
    if not keys:
        return None

    # Restrict to the first record's columns; rows missing a key give NaN
    df = pd.DataFrame(rows, columns=list(rows[0].keys()))
    datasets = [
        ChartSeries(
            label=key,
            data=[_point(value) for value in df[key].tolist()],
            background_color=chart_color(i),
        )
        for i, key in enumerate(keys)
    ]
    return ChartData(labels=row_labels(len(rows)), datasets=datasets)
