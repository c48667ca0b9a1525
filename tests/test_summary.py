"""Unit tests for history summaries."""

from storeaudit.models import AuditItem, AuditRecord
from storeaudit.summary import (
    details_text,
    display_notes,
    display_value,
    history_rows,
    meta_line,
    tally,
    tally_line,
)


def _record(**kwargs):
    items = [
        AuditItem.yn("A", "Yes"),
        AuditItem.yn("B", "No", "broken"),
        AuditItem.yn("C", ""),
        AuditItem.yn("D", "N/A"),
        AuditItem.note("Notes", ""),
    ]
    return AuditRecord(id="r", created_at="not a date", audit_type="Closing", items=items, **kwargs)


def test_display_value_dash_for_blank():
    assert display_value(AuditItem.yn("Q", "")) == "—"
    assert display_value(AuditItem.yn("Q", "No")) == "No"
    assert display_value(AuditItem.note("N", "x")) == ""
    assert display_notes(AuditItem.note("N", "")) == "—"


def test_tally_counts_yn_items_only():
    assert tally(_record()) == {"Yes": 1, "No": 1, "Blank": 1}
    assert tally_line(_record()) == "Yes: 1 • No: 1 • Blank: 1"


def test_meta_line_skips_blank_parts():
    assert meta_line(_record()) == "not a date"
    record = _record(audit_date="2024-05-01", audit_time="07:30", auditor="Sam")
    assert meta_line(record) == "2024-05-01 • 07:30 • Auditor: Sam • not a date"


def test_details_text():
    text = details_text(_record(header_notes="Truck late", device_name="Tablet"))
    lines = text.splitlines()
    assert lines[0] == "Closing Audit"
    assert "Header Notes" in lines
    assert "Device: Tablet" in lines
    assert "C: —" in lines
    assert "    broken" in lines


def test_history_rows_use_their_own_ids():
    groups = {
        "Closing": [
            AuditRecord(id="", created_at=""),
            AuditRecord(id="empty", created_at=""),
            AuditRecord(id="type:Closing", created_at=""),
            AuditRecord(id="dup", created_at=""),
            AuditRecord(id="dup", created_at=""),
        ],
        "Opening": [AuditRecord(id="o1", created_at="", audit_type="Opening")],
    }
    rows = history_rows(groups)
    iids = [r.iid for r in rows]
    assert len(iids) == len(set(iids))
    assert "empty" not in iids
    assert [r.audit_id for r in rows if r.audit_id is not None] == ["", "empty", "type:Closing", "dup", "dup", "o1"]
    groups_only = [r for r in rows if r.audit_id is None]
    assert [(r.text, r.values[0]) for r in groups_only] == [("Closing", "5 item(s)"), ("Opening", "1 item(s)")]
    assert rows[-1].parent == groups_only[1].iid
    assert rows[-1].audit_type == "Opening"


def test_history_rows_empty():
    assert history_rows({}) == []
