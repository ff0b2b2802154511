# === proceed_dashboard/services/workbook_parser.py ===
import io
import logging
import zipfile
from datetime import date, datetime, time
from typing import Any, Dict, List

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from proceed_dashboard.core.errors import ValidationError
from proceed_dashboard.services.template_service import header_field_key, lower_camel, snapshot_key

logger = logging.getLogger(__name__)


def _clean(value: Any) -> Any:
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _is_blank(row: List[Any]) -> bool:
    return all(v is None for v in row)


def _key_values(rows: List[List[Any]]) -> Dict[str, Any]:
    """Two-column Field/Value sheet -> mapping"""
    values = {}
    for row in rows:
        label = row[0] if row else None
        if label is None:
            continue
        if str(label).lower() == "field" and len(row) > 1 and str(row[1]).lower() == "value":
            continue
        values[header_field_key(label)] = row[1] if len(row) > 1 else None
    return values


def _records(rows: List[List[Any]]) -> List[Dict[str, Any]]:
    """Header row + data rows -> list of row objects keyed by column"""
    header, data = rows[0], rows[1:]
    keys = [lower_camel(h) if h is not None else "" for h in header]
    records = []
    for row in data:
        record = {}
        for index, key in enumerate(keys):
            if not key:
                continue
            record[key] = row[index] if index < len(row) else None
        records.append(record)
    return records


def parse_workbook(content: bytes) -> Dict[str, Any]:
    """Extract a dashboard snapshot from .xlsx bytes.

    The ``Headers`` sheet becomes a mapping, every other non-empty sheet a
    list of rows keyed by its header row. Blank rows are skipped.
    """
    try:
        wb = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as e:
        logger.warning(f"Unreadable workbook: {e}")
        raise ValidationError("Could not read spreadsheet. Upload a valid .xlsx file.", details={"error": str(e)})

    snapshot: Dict[str, Any] = {}
    try:
        for ws in wb.worksheets:
            rows = [[_clean(v) for v in row] for row in ws.iter_rows(values_only=True)]
            rows = [row for row in rows if not _is_blank(row)]
            if not rows:
                continue

            key = snapshot_key(ws.title)
            if not key:
                continue
            if key == "headers":
                snapshot[key] = _key_values(rows)
            else:
                snapshot[key] = _records(rows)
    finally:
        wb.close()

    if not snapshot:
        raise ValidationError("Spreadsheet contains no data")

    logger.info(f"Parsed workbook sheets: {list(snapshot.keys())}")
    return snapshot
