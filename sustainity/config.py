"""
Configuration constants and settings for the Sustainity CSV explorer.

This module centralizes all configuration values including:
- Static dataset location and default source
- Upload and export settings
- Sanitizer placeholder
- Chart colour parameters
- HTTP fetch settings
"""
import os
from pathlib import Path
from typing import Tuple
from dotenv import load_dotenv

load_dotenv()

# ============================================================================
# Base paths
# ============================================================================
BASE_DIR = Path(__file__).resolve().parent.parent

# Directory serving same-origin static CSV files (default dataset lives here)
STATIC_DIR = Path(os.getenv("STATIC_DIR", str(BASE_DIR / "public")))

# ============================================================================
# Source selection
# ============================================================================
DEFAULT_CSV_SOURCE = os.getenv("DEFAULT_CSV_SOURCE", "/2017PurchasePricesDec.csv")
ALLOWED_EXTENSIONS: Tuple[str, ...] = (".csv",)
CSV_ENCODING = os.getenv("CSV_ENCODING", "utf-8")
BLOB_PREFIX = "blob:"

# ============================================================================
# Export configuration
# ============================================================================
EXPORT_FILENAME = os.getenv("EXPORT_FILENAME", "sustainity-data.csv")
EXPORT_MEDIA_TYPE = "text/csv;charset=utf-8"

# ============================================================================
# Sanitizer
# ============================================================================
UI_ELEMENT_MARKER = "$$typeof"
UI_ELEMENT_PLACEHOLDER = "[React Element]"

# ============================================================================
# Chart colours (evenly spaced hue rotation per series)
# ============================================================================
CHART_HUE_STEP = int(os.getenv("CHART_HUE_STEP", "60"))
CHART_SATURATION = 70
CHART_LIGHTNESS = 50

# ============================================================================
# Table sorting
# ============================================================================
# Collation locale for text sorting; empty means "take it from the environment"
SORT_LOCALE = os.getenv("SORT_LOCALE", "")

# ============================================================================
# HTTP fetch configuration
# ============================================================================
DISABLE_SSL_VERIFY = os.getenv("DISABLE_SSL_VERIFY", "0").lower() in ("1", "true", "yes")


def chart_color(index: int) -> str:
    """
    Get the display colour for the chart series at a given index.

    Returns:
        CSS hsl() string, stable for the same index across re-renders
    """
    return f"hsl({index * CHART_HUE_STEP}, {CHART_SATURATION}%, {CHART_LIGHTNESS}%)"
