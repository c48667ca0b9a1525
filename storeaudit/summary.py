"""
Design (summary.py)
- Purpose: Text used by the history view: per-item display values, Yes/No/Blank tallies,
           the one-line header summary of an audit, and the rows of the history tree.
- Inputs: AuditItem / AuditRecord.
- Outputs: Strings and small dicts.
- Side effects: None.
- Thread-safety: Stateless.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .config import BLANK_DISPLAY, NO, YES
from .models import KIND_YN, AuditItem, AuditRecord
from .utils import format_created

GROUP_ROW_PREFIX = "type:"
AUDIT_ROW_PREFIX = "audit:"


def display_value(item: AuditItem) -> str:
    """Answer as shown in history; blank (unanswered) yn items show a dash. Notes items have no answer."""
    if item.kind != KIND_YN:
        return ""
    return item.value or BLANK_DISPLAY


def display_notes(item: AuditItem) -> str:
    return item.notes or BLANK_DISPLAY


def tally(record: AuditRecord) -> Dict[str, int]:
    """Count yn answers: {"Yes": n, "No": n, "Blank": n}. N/A answers are in none of the three."""
    counts = {"Yes": 0, "No": 0, "Blank": 0}
    for item in record.items:
        if item.kind != KIND_YN:
            continue
        if item.value == YES:
            counts["Yes"] += 1
        elif item.value == NO:
            counts["No"] += 1
        elif not item.value:
            counts["Blank"] += 1
    return counts


def tally_line(record: AuditRecord) -> str:
    counts = tally(record)
    return f"Yes: {counts['Yes']} • No: {counts['No']} • Blank: {counts['Blank']}"


def meta_line(record: AuditRecord) -> str:
    """e.g. "2024-05-01 • 07:30 • Auditor: Sam • 2024-05-01 07:42:10" (blank parts left out)."""
    bits = []
    if record.audit_date:
        bits.append(record.audit_date)
    if record.audit_time:
        bits.append(record.audit_time)
    if record.auditor:
        bits.append(f"Auditor: {record.auditor}")
    bits.append(format_created(record.created_at))
    return " • ".join(bits)


def details_text(record: AuditRecord) -> str:
    """Plain-text rendering of one audit for the details pane."""
    lines = [f"{record.audit_type} Audit", meta_line(record), tally_line(record)]
    if record.device_name:
        lines.append(f"Device: {record.device_name}")
    if record.header_notes:
        lines += ["", "Header Notes", record.header_notes]
    lines.append("")
    for item in record.items:
        if item.kind == KIND_YN:
            lines.append(f"{item.label}: {display_value(item)}")
            if item.notes:
                lines.append(f"    {item.notes}")
        else:
            lines.append(f"{item.label}:")
            lines.append(f"    {display_notes(item)}")
    return "\n".join(lines)


@dataclass(frozen=True)
class HistoryRow:
    """
    Design (HistoryRow)
    - One row of the history tree: a type group (audit_id None) or an audit under its group.
    - iid: tree row id. Group rows use "type:<name>", audit rows "audit:<position>", so stored ids
           (blank, repeated, or shaped like a row id) never become tree ids themselves.
    """
    iid: str
    parent: str
    text: str
    values: Tuple[str, str]
    audit_type: str
    audit_id: Optional[str] = None


def history_rows(groups: Dict[str, List[AuditRecord]]) -> List[HistoryRow]:
    """Tree rows for grouped audits, groups in the given order, each followed by its audits."""
    rows: List[HistoryRow] = []
    position = 0
    for audit_type, audits in groups.items():
        group_iid = f"{GROUP_ROW_PREFIX}{audit_type}"
        rows.append(HistoryRow(group_iid, "", audit_type, (f"{len(audits)} item(s)", ""), audit_type))
        for audit in audits:
            rows.append(
                HistoryRow(
                    f"{AUDIT_ROW_PREFIX}{position}", group_iid, f"{audit.audit_type} Audit",
                    (meta_line(audit), tally_line(audit)), audit_type, audit.id,
                )
            )
            position += 1
    return rows
