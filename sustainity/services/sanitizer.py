"""
Record sanitization.

Normalizes parsed CSV records into a closed set of display-safe scalars:
- str, int, float, bool and None pass through unchanged
- date/datetime values pass through (they are scalars the table can sort)
- objects carrying a rendered-UI-element marker become a placeholder
  (table and export paths) or None (chart path)
- any other structured value becomes its JSON text

Sanitization is pure and total: it never raises, it only degrades unknown
shapes to a safe scalar.
"""
import json
import math
from datetime import date
from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, Optional

from sustainity import config

SCALAR_TYPES = (str, int, float, bool, type(None), date)

TABLE_MODE = "table"
EXPORT_MODE = "export"
CHART_MODE = "chart"


def is_scalar(value: Any) -> bool:
    return isinstance(value, SCALAR_TYPES)


def is_ui_element(value: Any) -> bool:
    """Check whether a value looks like a live UI element leaked into the sheet."""
    if isinstance(value, Mapping):
        return config.UI_ELEMENT_MARKER in value
    try:
        return hasattr(value, config.UI_ELEMENT_MARKER)
    except Exception:
        return False


def _to_json_text(value: Any) -> str:
    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError):
        pass
    try:
        return str(value)
    except Exception:
        return repr(type(value))


def sanitize_value(value: Any, mode: str = TABLE_MODE) -> Any:
    if is_scalar(value):
        return value
    if is_ui_element(value):
        return None if mode == CHART_MODE else config.UI_ELEMENT_PLACEHOLDER
    return _to_json_text(value)


def sanitize(raw: Any, mode: str = TABLE_MODE) -> Dict[str, Any]:
    """
    Sanitize one parsed record.

    Args:
        raw: Mapping of column name to raw value (anything else yields {})
        mode: "table", "export" or "chart"; decides what UI-element markers become

    Returns:
        New dict whose values are all scalars
    """
    if not isinstance(raw, Mapping):
        return {}
    return {
        ("" if key is None else str(key)): sanitize_value(value, mode)
        for key, value in raw.items()
    }


def sanitize_records(records: Iterable[Any], mode: str = TABLE_MODE) -> List[Dict[str, Any]]:
    return [sanitize(record, mode) for record in records]


# ============================================================================
# Value helpers shared by the table view and the numeric summary
# ============================================================================

def is_number(value: Any) -> bool:
    """True for int/float values; bools are not numbers here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_number(value: Any) -> Optional[float]:
    """
    Parse a string that is entirely a finite number.

    Partial parses ("12abc"), empty strings and non-finite values
    ("nan", "inf") give None.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text or "_" in text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def numeric_value(value: Any) -> Optional[float]:
    """Numeric reading of a cell: numbers as-is, numeric strings parsed, else None."""
    if is_number(value):
        return value
    return parse_number(value)


def display_text(value: Any) -> str:
    """String form of a cell as shown in the table; missing values show as empty."""
    if value is None:
        return ""
    return str(value)
