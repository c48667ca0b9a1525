"""
Design (builder.py)
- Purpose: Reduce one flat form submission to one AuditRecord.
- Inputs: submission (Mapping[str, str]), the widget layout the form was rendered from
          (optional; discovered from "_type" fields when omitted), device name.
- Outputs: A new AuditRecord with a fresh id and created_at.
- Side effects: None (persisting the record is the caller's job, via AuditRepo.append).
- Thread-safety: Stateless.
"""

import logging
from typing import Any, Mapping, Optional, Sequence

from .config import DEFAULT_AUDIT_TYPE
from .fields import field_value
from .models import AuditRecord
from .utils import now_iso, uid
from .widgets import Widget, decode_items, discover_widgets

logger = logging.getLogger(__name__)


def build_audit(
    submission: Mapping[str, str],
    widgets: Optional[Sequence[Widget]] = None,
    *,
    device_name: str = "",
    domain_extension: Any = None,
) -> AuditRecord:
    """
    Purpose: Build a record from a submitted form.
    Inputs:
        submission: every field the form submitted, including the header fields
                    audit_type, auditor, audit_date, audit_time, header_notes.
        widgets: layout used to render the form; items follow its order.
        device_name: name of this device; falls back to the submission's "device_name" field.
        domain_extension: opaque extra data stored with the record.
    Notes: Every call yields a new id and created_at; re-submitting a form never edits
           an existing record.
    """
    if widgets is None:
        widgets = discover_widgets(submission)
    record = AuditRecord(
        id=uid(),
        created_at=now_iso(),
        audit_type=field_value(submission, "audit_type").strip() or DEFAULT_AUDIT_TYPE,
        auditor=field_value(submission, "auditor"),
        audit_date=field_value(submission, "audit_date"),
        audit_time=field_value(submission, "audit_time"),
        header_notes=field_value(submission, "header_notes"),
        device_name=device_name or field_value(submission, "device_name"),
        items=decode_items(submission, widgets),
        domain_extension=domain_extension,
    )
    logger.debug("Built %s audit %s with %d items", record.audit_type, record.id, len(record.items))
    return record
