"""
Tests for upload validation and extraction, independent of HTTP.
"""

import json

import pytest

from conftest import XLSX, make_workbook, run
from proceed_dashboard.core.errors import PayloadTooLargeError, ValidationError
from proceed_dashboard.services.upload_service import (
    apply_upload,
    ensure_snapshot,
    extract_from_envelope,
    parse_json_bytes,
    resolve_file_kind,
)
from proceed_dashboard.store.memory import InMemoryVersionStore

MAX = 1024 * 1024


@pytest.mark.parametrize("content_type,filename,expected", [
    ("application/json", "a.json", "json"),
    ("application/json; charset=utf-8", "a.txt", "json"),
    (XLSX, "a.xlsx", "spreadsheet"),
    ("application/vnd.ms-excel", "a.xls", "spreadsheet"),
    ("application/octet-stream", "report.XLSX", "spreadsheet"),
    (None, "data.json", "json"),
])
def test_resolve_file_kind_accepts_json_and_spreadsheets(content_type, filename, expected):
    assert resolve_file_kind(content_type, filename) == expected


@pytest.mark.parametrize("content_type,filename", [
    ("text/plain", "a.json"),
    ("text/csv", "a.csv"),
    ("application/octet-stream", "a.csv"),
    ("application/pdf", "a.pdf"),
])
def test_resolve_file_kind_rejects_other_types(content_type, filename):
    with pytest.raises(ValidationError) as exc_info:
        resolve_file_kind(content_type, filename)
    assert "Only Excel and JSON" in exc_info.value.message
    assert exc_info.value.status_code == 400


def test_parse_json_failure_attaches_raw_text():
    with pytest.raises(ValidationError) as exc_info:
        parse_json_bytes(b'{"title": ')
    details = exc_info.value.details
    assert details["raw"] == '{"title": '
    assert "error" in details


def test_parse_json_raw_text_is_truncated():
    raw = b"x" * 5000
    with pytest.raises(ValidationError) as exc_info:
        parse_json_bytes(raw)
    assert len(exc_info.value.details["raw"]) == 2000


def test_parse_json_rejects_non_utf8():
    with pytest.raises(ValidationError):
        parse_json_bytes(b"\xff\xfe\x00{")


def test_parse_json_accepts_bom():
    assert parse_json_bytes("\ufeff{\"a\": 1}".encode("utf-8")) == {"a": 1}


@pytest.mark.parametrize("token", ["NaN", "Infinity", "-Infinity"])
def test_parse_json_rejects_non_finite_numbers(token):
    raw = f'{{"metrics": [{{"value": {token}}}]}}'.encode("utf-8")
    with pytest.raises(ValidationError) as exc_info:
        parse_json_bytes(raw)
    assert exc_info.value.message == "Invalid JSON content"
    assert token in exc_info.value.details["error"]
    assert exc_info.value.details["raw"] == raw.decode("utf-8")


def test_snapshot_must_be_object():
    with pytest.raises(ValidationError):
        ensure_snapshot([1, 2, 3])
    assert ensure_snapshot({"a": 1}) == {"a": 1}


def test_envelope_uses_data_and_metadata():
    raw = json.dumps({
        "filename": "p.json",
        "size": 1024,
        "uploadedBy": "Test User",
        "description": "Test portfolio data",
        "data": {"title": "Q4 2024 Portfolio"},
    }).encode()
    extracted = extract_from_envelope(raw, MAX)

    assert extracted.snapshot == {"title": "Q4 2024 Portfolio"}
    assert extracted.meta.filename == "p.json"
    assert extracted.meta.size == 1024
    assert extracted.meta.uploaded_by == "Test User"
    assert extracted.meta.description == "Test portfolio data"


def test_envelope_without_data_uses_whole_body():
    raw = b'{"title": "Bare"}'
    extracted = extract_from_envelope(raw, MAX)
    assert extracted.snapshot == {"title": "Bare"}
    assert extracted.meta.filename == "uploaded-file"
    assert extracted.meta.size == len(raw)
    assert extracted.meta.uploaded_by == "Anonymous"


def test_envelope_rejects_empty_and_arrays():
    with pytest.raises(ValidationError):
        extract_from_envelope(b"   ", MAX)
    with pytest.raises(ValidationError):
        extract_from_envelope(b"[1, 2]", MAX)
    with pytest.raises(ValidationError):
        extract_from_envelope(b'{"data": [1, 2]}', MAX)


def test_envelope_size_cap():
    with pytest.raises(PayloadTooLargeError):
        extract_from_envelope(b'{"data": {"a": "' + b"x" * 100 + b'"}}', 50)


def test_preview_and_commit_extract_identically():
    raw = b'{"filename": "p.json", "data": {"title": "Q4"}}'
    store = InMemoryVersionStore()

    preview = extract_from_envelope(raw, MAX)
    record, committed = run(apply_upload(store, preview, commit=False))
    assert committed is False
    assert record.id == "preview"
    assert run(store.get_snapshot()) is None

    commit = extract_from_envelope(raw, MAX)
    record, committed = run(apply_upload(store, commit, commit=True))
    assert committed is True
    assert preview.snapshot == commit.snapshot
    assert run(store.get_snapshot()) == {"title": "Q4"}


def test_spreadsheet_bytes_make_a_workbook():
    content = make_workbook({"Status": [["Project", "Status"], ["A", "On Track"]]})
    assert content[:2] == b"PK"
