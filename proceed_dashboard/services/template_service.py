# === proceed_dashboard/services/template_service.py ===
import io
import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

TEMPLATE_NAME = "PROCEED Portfolio Template"
TEMPLATE_VERSION = "1.0.0"
TEMPLATE_FILENAME = "proceed-portfolio-template.xlsx"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

HEADER_FIELDS = {
    "title": "Portfolio Title",
    "subtitle": "Portfolio Subtitle",
    "period": "Reporting Period",
}

# sheet name -> (snapshot key, columns)
SHEETS = {
    "Headers": ("headers", ["Field", "Value"]),
    "Status": ("statusTable", ["Project", "Status", "Progress", "Health", "Owner"]),
    "Highlights": ("highlights", ["Project", "Description", "Impact"]),
    "Lowlights": ("lowlights", ["Project", "Issue", "Action", "Owner", "Due Date"]),
    "Milestones": ("milestones", ["Project", "Milestone", "Due Date", "Status"]),
    "Metrics": ("metrics", ["Metric", "Value", "Target", "Trend"]),
    "Lookups": ("lookups", ["List", "Value"]),
}

DEFAULT_LOOKUPS = [
    ("Health", "Green"),
    ("Health", "Amber"),
    ("Health", "Red"),
    ("Status", "On Track"),
    ("Status", "At Risk"),
    ("Status", "Off Track"),
    ("Status", "Complete"),
]

HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill("solid", fgColor="1F4E78")


def lower_camel(label: str) -> str:
    """'Due Date' -> 'dueDate', 'Status' -> 'status'"""
    words = [w for w in re.split(r"[^0-9A-Za-z]+", str(label).strip()) if w]
    if not words:
        return ""
    return words[0].lower() + "".join(w[:1].upper() + w[1:].lower() for w in words[1:])


def snapshot_key(sheet_name: str) -> str:
    if sheet_name in SHEETS:
        return SHEETS[sheet_name][0]
    return lower_camel(sheet_name)


def header_field_key(label: str) -> str:
    for key, field_label in HEADER_FIELDS.items():
        if field_label.lower() == str(label).strip().lower():
            return key
    return lower_camel(label)


def get_template_descriptor(download_url: Optional[str] = None) -> Dict[str, Any]:
    """Static description of the workbook layout the upload endpoint understands"""
    structure: Dict[str, Any] = {"headers": dict(HEADER_FIELDS)}
    # keyed by sheet name; "snapshotKey" is where the parsed rows land
    for sheet_name, (key, columns) in SHEETS.items():
        if sheet_name == "Headers":
            continue
        structure[lower_camel(sheet_name)] = {"sheet": sheet_name, "snapshotKey": key, "columns": list(columns)}

    return {
        "name": TEMPLATE_NAME,
        "version": TEMPLATE_VERSION,
        "sheets": list(SHEETS.keys()),
        "structure": structure,
        "downloadUrl": download_url,
    }


def _cell_value(value: Any) -> Any:
    if value is None or isinstance(value, (int, float, str, bool, date, datetime)):
        return value
    return str(value)


def _write_header(ws, columns: List[str]) -> None:
    ws.append(columns)
    for cell in ws[1]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
    for index, column in enumerate(columns):
        ws.column_dimensions[get_column_letter(index + 1)].width = max(14, len(column) + 4)
    ws.freeze_panes = "A2"


def build_template_workbook(snapshot: Optional[Dict[str, Any]] = None) -> bytes:
    """Render the template as .xlsx bytes, pre-filled from ``snapshot`` when given"""
    snapshot = snapshot or {}
    wb = Workbook()
    wb.remove(wb.active)

    for sheet_name, (key, columns) in SHEETS.items():
        ws = wb.create_sheet(title=sheet_name)
        _write_header(ws, columns)

        if sheet_name == "Headers":
            values = snapshot.get(key) if isinstance(snapshot.get(key), dict) else {}
            for field_key, label in HEADER_FIELDS.items():
                ws.append([label, _cell_value(values.get(field_key))])
            continue

        rows = snapshot.get(key)
        if sheet_name == "Lookups" and not rows:
            for row in DEFAULT_LOOKUPS:
                ws.append(list(row))
            continue
        if not isinstance(rows, list):
            continue
        for row in rows:
            if isinstance(row, dict):
                ws.append([_cell_value(row.get(lower_camel(column))) for column in columns])

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
