"""
Design (models.py)
- Purpose: Define simple, typed data structures for domain entities (AuditItem, AuditRecord).
- Inputs: Field values (str) or plain dicts loaded from JSON.
- Outputs: Dataclass instances; plain dicts for persistence/export.
- Side effects: None.
- Thread-safety: Dataclasses are plain containers; AuditRepo protects concurrent access.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import DEFAULT_AUDIT_TYPE

KIND_YN = "yn"
KIND_NOTES = "notes"

_ITEM_FIELDS = ("label", "kind", "value", "notes")

_RECORD_FIELDS = (
    "id",
    "created_at",
    "audit_type",
    "auditor",
    "audit_date",
    "audit_time",
    "header_notes",
    "device_name",
    "items",
    "domain_extension",
)


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class AuditItem:
    """
    Design (AuditItem)
    - Purpose: One answered question.
    - Fields:
        label: question text.
        kind: "yn" or "notes".
        value: "Yes"/"No"/"N/A"/"" for yn items ("" = unanswered); None for notes items.
        notes: free text ("" when blank).
        extra: keys this version does not know about, written back after the known ones.
        raw: the stored dict of an item whose kind is missing or unknown; written back verbatim.
    """
    label: str
    kind: str
    value: str | None = None
    notes: str = ""
    extra: Dict[str, Any] = field(default_factory=dict, hash=False)
    raw: Optional[Dict[str, Any]] = field(default=None, hash=False)

    @classmethod
    def yn(cls, label: str, value: str, notes: str = "") -> "AuditItem":
        return cls(label=label, kind=KIND_YN, value=_text(value), notes=_text(notes))

    @classmethod
    def note(cls, label: str, notes: str) -> "AuditItem":
        return cls(label=label, kind=KIND_NOTES, notes=_text(notes))

    def to_dict(self) -> Dict[str, Any]:
        if self.raw is not None:
            return dict(self.raw)
        d: Dict[str, Any] = {"label": self.label, "kind": self.kind}
        if self.kind == KIND_YN:
            d["value"] = self.value or ""
        elif self.kind != KIND_NOTES and self.value is not None:
            # unknown kinds from imported data keep whatever value they had
            d["value"] = self.value
        d["notes"] = self.notes
        for k, v in self.extra.items():
            d.setdefault(k, v)
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuditItem":
        kind = _text(data.get("kind"))
        label = _text(data.get("label"))
        notes = _text(data.get("notes"))
        extra = {k: v for k, v in data.items() if k not in _ITEM_FIELDS}
        if kind == KIND_YN:
            return cls(label=label, kind=KIND_YN, value=_text(data.get("value")), notes=notes, extra=extra)
        if kind == KIND_NOTES:
            return cls(label=label, kind=KIND_NOTES, notes=notes, extra=extra)
        # missing or unknown kind: keep the stored dict as-is
        value = data.get("value")
        return cls(label=label, kind=kind, value=None if value is None else _text(value), notes=notes, raw=dict(data))


@dataclass
class AuditRecord:
    """
    Design (AuditRecord)
    - Purpose: One saved audit (header + ordered answered items).
    - Fields:
        id: unique identifier, never reassigned once set.
        created_at: ISO-8601 timestamp set once at creation.
        audit_type: form name; "Audit" when blank.
        auditor, audit_date, audit_time, header_notes, device_name: free text ("" when blank).
        items: AuditItems in the order the widgets were declared.
        domain_extension: optional opaque JSON data (e.g. cigarette-count totals), carried untouched.
        extra: any keys this version does not know about, preserved on round-trip.
    """
    id: str
    created_at: str
    audit_type: str = DEFAULT_AUDIT_TYPE
    auditor: str = ""
    audit_date: str = ""
    audit_time: str = ""
    header_notes: str = ""
    device_name: str = ""
    items: List[AuditItem] = field(default_factory=list)
    domain_extension: Any = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = dict(self.extra)
        d.update(
            {
                "id": self.id,
                "created_at": self.created_at,
                "audit_type": self.audit_type,
                "auditor": self.auditor,
                "audit_date": self.audit_date,
                "audit_time": self.audit_time,
                "header_notes": self.header_notes,
                "device_name": self.device_name,
                "items": [i.to_dict() for i in self.items],
            }
        )
        if self.domain_extension is not None:
            d["domain_extension"] = self.domain_extension
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuditRecord":
        """
        Purpose: Build a record from a stored or imported dict.
        Notes: Missing header fields become ""; a blank audit_type becomes "Audit";
               non-dict entries in items are dropped.
        """
        raw_items = data.get("items")
        items = [AuditItem.from_dict(i) for i in raw_items if isinstance(i, dict)] if isinstance(raw_items, list) else []
        return cls(
            id=_text(data.get("id")),
            created_at=_text(data.get("created_at")),
            audit_type=_text(data.get("audit_type")).strip() or DEFAULT_AUDIT_TYPE,
            auditor=_text(data.get("auditor")),
            audit_date=_text(data.get("audit_date")),
            audit_time=_text(data.get("audit_time")),
            header_notes=_text(data.get("header_notes")),
            device_name=_text(data.get("device_name")),
            items=items,
            domain_extension=data.get("domain_extension"),
            extra={k: v for k, v in data.items() if k not in _RECORD_FIELDS},
        )
