"""
CSV source reading and parsing.

Handles reading CSV text from the supported sources and parsing it into
records keyed by the header row:
- static files served from the configured static directory
- http(s) URLs fetched with requests
- uploaded files held in the blob store
"""
import csv
from io import StringIO
from pathlib import Path
from typing import List, Dict, Any, Optional

import requests
from fastapi import UploadFile

from sustainity import config
from sustainity.errors import FetchError, SelectionError
from sustainity.services.blobs import BlobStore, is_blob


# ============================================================================
# Parsing
# ============================================================================

def parse_csv(text: str) -> Dict[str, Any]:
    """
    Parse CSV text into records using the first row as header.

    This function:
    - Strips a leading byte order mark
    - Parses with DictReader (column name → value), skipping empty lines
    - Collects row-level errors instead of raising: rows whose field count
      differs from the header, and malformed quoting

    Args:
        text: Raw CSV text

    Returns:
        Dictionary with:
        - "columns": Header names in file order
        - "rows": List of dictionaries, one per non-empty data row
        - "errors": List of row-level error messages (empty on success)
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    reader = csv.DictReader(StringIO(text, newline=""), strict=True)
    headers: List[str] = []
    rows: List[Dict[str, Any]] = []
    errors: List[str] = []

    try:
        headers = list(reader.fieldnames or [])
        for row in reader:
            # DictReader puts surplus fields under None and fills short rows with None
            if None in row:
                errors.append(
                    f"Row {reader.line_num}: too many fields "
                    f"(expected {len(headers)}, got {len(headers) + len(row[None])})"
                )
                continue
            if any(value is None for value in row.values()):
                present = sum(1 for value in row.values() if value is not None)
                errors.append(
                    f"Row {reader.line_num}: too few fields "
                    f"(expected {len(headers)}, got {present})"
                )
                continue
            rows.append(row)
    except csv.Error as e:
        errors.append(f"Row {reader.line_num}: {e}")

    return {"columns": headers, "rows": rows, "errors": errors}


# ============================================================================
# Source reading
# ============================================================================

def _http_error(status: int) -> FetchError:
    return FetchError(f"HTTP error! status: {status}", status=status)


def _read_url(url: str) -> str:
    try:
        response = requests.get(url, verify=not config.DISABLE_SSL_VERIFY)
    except requests.exceptions.RequestException as e:
        raise FetchError(str(e)) from e
    if not response.ok:
        raise _http_error(response.status_code)
    return response.content.decode(config.CSV_ENCODING, errors="replace")


def _resolve_static(source: str) -> Path:
    root = config.STATIC_DIR.resolve()
    if "\x00" in source:
        raise FetchError("Invalid source path: embedded null byte", status=400)
    try:
        path = (root / source.lstrip("/")).resolve()
    except (ValueError, OSError) as e:
        # symlink loops or names the OS rejects
        raise FetchError(f"Invalid source path: {e}", status=400) from e
    if path != root and root not in path.parents:
        raise _http_error(403)
    return path


def _read_static(source: str) -> str:
    path = _resolve_static(source)
    try:
        if not path.is_file():
            raise _http_error(404)
        return path.read_bytes().decode(config.CSV_ENCODING, errors="replace")
    except (OSError, ValueError) as e:
        raise FetchError(f"Error reading file: {e}") from e


def read_source(source: str, blobs: Optional[BlobStore] = None) -> str:
    """
    Read the CSV text behind a source id.

    Args:
        source: "blob:<id>", an http(s) URL, or a path under the static directory
        blobs: Blob store holding uploaded files

    Returns:
        Decoded CSV text

    Raises:
        FetchError: Non-OK response, missing file, revoked blob or read failure
    """
    if is_blob(source):
        text = blobs.get(source) if blobs is not None else None
        if text is None:
            raise _http_error(404)
        return text
    if source.startswith(("http://", "https://")):
        return _read_url(source)
    return _read_static(source)


def has_allowed_extension(filename: str) -> bool:
    return filename.lower().endswith(config.ALLOWED_EXTENSIONS)


def read_upload(file: UploadFile) -> str:
    """
    Read an uploaded CSV file as text.

    Invalid byte sequences are replaced rather than rejected so that "dirty"
    CSV files still load.

    Raises:
        SelectionError: No file name, non-CSV file name, or unreadable file
    """
    if not file or not file.filename:
        raise SelectionError("Please select a file")
    if not has_allowed_extension(file.filename):
        raise SelectionError("Please upload a CSV file")
    try:
        content = file.file.read()
    except OSError as e:
        raise SelectionError("Error reading file") from e

    # Reset file pointer so the upload can be re-read if needed
    file.file.seek(0)
    return content.decode(config.CSV_ENCODING, errors="replace")
