"""
Design (widgets.py)
- Purpose: The catalog of question widgets. Each rendered widget instance is a small tagged
           value (kind + instance key + label) that knows the flat fields it submits and how
           those fields expand into AuditItems.
- Inputs: Instance keys and labels at render time; flat submissions at save time.
- Outputs: Flat field dicts (encode) and ordered AuditItem lists (decode).
- Side effects: None.
- Thread-safety: Widgets are immutable; safe to share.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence, Tuple, Type

from . import fields
from .config import OUTS_NOTES_LABEL, OUTS_ROWS, OUTS_TITLE, YN_CHOICES, YNNA_CHOICES
from .models import AuditItem

logger = logging.getLogger(__name__)


def _constrain(value: str, choices: Tuple[str, ...]) -> str:
    return value if value in choices else ""


@dataclass(frozen=True)
class Widget:
    """
    Design (Widget)
    - kind: tag written to the "{key}_type" field.
    - key: per-instance key prefixing every field of this widget.
    - label: question text (written to "{key}_label").
    """
    key: str
    label: str = ""

    kind = ""
    choices = ()

    def fields(self, answers: Mapping[str, str]) -> Dict[str, str]:
        raise NotImplementedError

    def expand(self, submission: Mapping[str, str]) -> List[AuditItem]:
        raise NotImplementedError

    def _value(self, submission: Mapping[str, str], *parts: str) -> str:
        return fields.field_value(submission, fields.field_name(self.key, *parts))

    def _label(self, submission: Mapping[str, str]) -> str:
        # the submitted label wins; the declared label covers forms that omit the hidden field
        return self._value(submission, fields.LABEL) or self.label


@dataclass(frozen=True)
class YesNoWidget(Widget):
    """Yes/No radio pair plus a notes box. Leaving both radios unchecked means unanswered."""

    kind = "yn"
    choices = YN_CHOICES

    def fields(self, answers: Mapping[str, str]) -> Dict[str, str]:
        out = {
            fields.field_name(self.key, fields.LABEL): self.label,
            fields.field_name(self.key, fields.TYPE): self.kind,
            fields.field_name(self.key, fields.NOTES): answers.get("notes") or "",
        }
        value = answers.get("value") or ""
        if value:
            out[fields.field_name(self.key, fields.YN)] = value
        return out

    def expand(self, submission: Mapping[str, str]) -> List[AuditItem]:
        value = _constrain(self._value(submission, fields.YN), self.choices)
        return [AuditItem.yn(self._label(submission), value, self._value(submission, fields.NOTES))]


@dataclass(frozen=True)
class YesNoNAWidget(Widget):
    """Yes/No/N-A radio group without notes."""

    kind = "ynna"
    choices = YNNA_CHOICES

    def fields(self, answers: Mapping[str, str]) -> Dict[str, str]:
        out = {
            fields.field_name(self.key, fields.LABEL): self.label,
            fields.field_name(self.key, fields.TYPE): self.kind,
        }
        value = answers.get("value") or ""
        if value:
            out[fields.field_name(self.key, fields.YN)] = value
        return out

    def expand(self, submission: Mapping[str, str]) -> List[AuditItem]:
        value = _constrain(self._value(submission, fields.YN), self.choices)
        return [AuditItem.yn(self._label(submission), value)]


@dataclass(frozen=True)
class NotesWidget(Widget):
    """Free-text notes only."""

    kind = "notes"

    def fields(self, answers: Mapping[str, str]) -> Dict[str, str]:
        return {
            fields.field_name(self.key, fields.LABEL): self.label,
            fields.field_name(self.key, fields.TYPE): self.kind,
            fields.field_name(self.key, fields.NOTES): answers.get("notes") or "",
        }

    def expand(self, submission: Mapping[str, str]) -> List[AuditItem]:
        return [AuditItem.note(self._label(submission), self._value(submission, fields.NOTES))]


@dataclass(frozen=True)
class OutsWidget(Widget):
    """
    Design (OutsWidget)
    - Purpose: Three fixed Yes/No rows (sales floor, cooler, beer) sharing one notes box.
    - Fields: "{key}_{row}_label" and "{key}_{row}_yn" per row, "{key}_notes", "{key}_type".
    - Expands to the same shape as simple widgets: three yn items with empty notes,
      then an "Outs notes" notes item, so history/summary code never special-cases it.
    - answers: {"sf": ..., "cool": ..., "beer": ..., "notes": ...}
    """
    label: str = OUTS_TITLE

    kind = "triOuts"
    choices = YN_CHOICES

    def fields(self, answers: Mapping[str, str]) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for row, row_label in OUTS_ROWS:
            out[fields.field_name(self.key, row, fields.LABEL)] = row_label
            value = answers.get(row) or ""
            if value:
                out[fields.field_name(self.key, row, fields.YN)] = value
        out[fields.field_name(self.key, fields.NOTES)] = answers.get("notes") or ""
        out[fields.field_name(self.key, fields.TYPE)] = self.kind
        return out

    def expand(self, submission: Mapping[str, str]) -> List[AuditItem]:
        items = [
            AuditItem.yn(row_label, _constrain(self._value(submission, row, fields.YN), self.choices))
            for row, row_label in OUTS_ROWS
        ]
        items.append(AuditItem.note(OUTS_NOTES_LABEL, self._value(submission, fields.NOTES)))
        return items


WIDGET_KINDS: Dict[str, Type[Widget]] = {
    cls.kind: cls for cls in (YesNoWidget, NotesWidget, YesNoNAWidget, OutsWidget)
}


def widget_for(kind: str, key: str, label: str = "") -> Widget:
    """
    Purpose: Construct a widget instance from its kind tag.
    Raises: KeyError for an unknown kind.
    """
    cls = WIDGET_KINDS[kind]
    if cls is OutsWidget and not label:
        return OutsWidget(key=key)
    return cls(key=key, label=label)


def discover_widgets(submission: Mapping[str, str]) -> List[Widget]:
    """
    Purpose: Rebuild a widget layout from a bare submission by scanning "_type" fields.
    Outputs: Widgets in submission order. Unknown type tags (including the "audit_type"
             header field, which also ends in "_type") are skipped.
    """
    found: List[Widget] = []
    for key, kind in fields.scan_instance_keys(submission):
        if kind not in WIDGET_KINDS:
            logger.debug("Ignoring field %s_type with unknown widget kind %r", key, kind)
            continue
        found.append(widget_for(kind, key))
    return found


def decode_items(submission: Mapping[str, str], widgets: Sequence[Widget]) -> List[AuditItem]:
    """Expand every widget of the layout against the submission, preserving layout order."""
    items: List[AuditItem] = []
    for widget in widgets:
        items.extend(widget.expand(submission))
    return items
