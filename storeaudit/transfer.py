"""
Design (transfer.py)
- Purpose: Move audits between devices as JSON documents.
    Export: filtered snapshot of the collection wrapped with schema tag, time and device.
    Import: accept a bare list of audits or a wrapped export document, merge by id
            (an id already present, or seen earlier in the same batch, is skipped),
            re-sort newest first and write once.
- Inputs: AuditRepo; audit type filter; JSON text/bytes or an already-parsed value.
- Outputs: Export dict / JSON text / filename; ImportResult(added, skipped).
- Side effects: import_audits() writes the merged collection once. Nothing is written when the
                document shape is rejected.
- Thread-safety: import holds the repository lock for its whole read-merge-write cycle.
"""

import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Optional

from .config import EXPORT_ALL, EXPORT_FILENAME_PREFIX, EXPORT_SCHEMA
from .models import AuditRecord
from .repository import AuditRepo
from .utils import normalize_for_filename, now_iso, parse_timestamp, uid

logger = logging.getLogger(__name__)


class ImportFormatError(ValueError):
    """The document is neither a list of audits nor an object with an "audits" list."""


@dataclass
class ImportResult:
    added: int = 0
    skipped: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"added": self.added, "skipped": self.skipped}


def _is_all(audit_type: Optional[str]) -> bool:
    return not audit_type or audit_type == EXPORT_ALL


# -------- Export --------

def build_export(
    audits: List[AuditRecord],
    audit_type: Optional[str] = None,
    device_name: str = "",
    exported_at: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Purpose: Wrap (optionally filtered) audits into an export document.
    Inputs: audit_type None/""/"ALL" exports everything; otherwise only that type.
    Outputs: {"schema", "exported_at", "exported_from_device", "filter": {"audit_type"}, "audits"}
    """
    selected = audits if _is_all(audit_type) else [a for a in audits if a.audit_type == audit_type]
    return {
        "schema": EXPORT_SCHEMA,
        "exported_at": exported_at or now_iso(),
        "exported_from_device": device_name or "",
        "filter": {"audit_type": EXPORT_ALL if _is_all(audit_type) else audit_type},
        "audits": [a.to_dict() for a in selected],
    }


def export_audits(repo: AuditRepo, audit_type: Optional[str] = None, device_name: str = "") -> Dict[str, Any]:
    """Snapshot the repository into an export document. Does not modify the repository."""
    doc = build_export(repo.load(), audit_type, device_name)
    logger.info("Exported %d audit(s) (filter: %s)", len(doc["audits"]), doc["filter"]["audit_type"])
    return doc


def dump_export(doc: Dict[str, Any]) -> str:
    return json.dumps(doc, indent=2, ensure_ascii=False)


def export_filename(audit_type: Optional[str] = None, on: Optional[date] = None) -> str:
    """
    Purpose: Default file name for a saved export.
    Outputs: "bt3158_audits_{type slug or 'all'}_{YYYY-MM-DD}.json"
    """
    slug = "all" if _is_all(audit_type) else (normalize_for_filename(audit_type) or "all")
    day = (on or date.today()).isoformat()
    return f"{EXPORT_FILENAME_PREFIX}_{slug}_{day}.json"


# -------- Import --------

def parse_import(payload: Any) -> List[Any]:
    """
    Purpose: Extract the list of incoming audit entries from an import payload.
    Inputs: JSON text, bytes, or an already-parsed value.
    Outputs: The raw entries (not yet validated individually).
    Raises: ImportFormatError when the payload is not JSON, or is neither a list
            nor an object whose "audits" field is a list. A list is checked first.
    """
    data = payload
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = payload.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ImportFormatError("Invalid format: file is not UTF-8 text") from exc
    if isinstance(payload, str):
        try:
            data = json.loads(payload)
        except (ValueError, RecursionError) as exc:
            raise ImportFormatError("Invalid format: file is not valid JSON") from exc
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("audits"), list):
        return data["audits"]
    raise ImportFormatError("Invalid format: expected a list of audits or an export with an \"audits\" list")


def merge_audits(existing: List[AuditRecord], incoming: List[Any]) -> tuple[List[AuditRecord], ImportResult]:
    """
    Purpose: Merge incoming entries into an existing collection by id.
    Outputs: (merged collection sorted newest first, counts).
    Notes:
        - An entry without an id gets a fresh one; ids present are trusted as-is.
        - Seen ids accumulate, so duplicates inside the batch are skipped too.
        - Entries that are not objects are counted as skipped.
        - Sort is stable; missing/unparsable created_at sorts as the epoch (last).
    """
    result = ImportResult()
    seen = {a.id for a in existing}
    working = list(existing)
    for entry in incoming:
        if not isinstance(entry, dict):
            result.skipped += 1
            continue
        record = AuditRecord.from_dict(entry)
        if not record.id:
            record.id = uid()
        if record.id in seen:
            result.skipped += 1
            continue
        seen.add(record.id)
        working.append(record)
        result.added += 1
    working.sort(key=lambda a: parse_timestamp(a.created_at), reverse=True)
    return working, result


def import_audits(repo: AuditRepo, payload: Any) -> ImportResult:
    """
    Purpose: Import a document into the repository.
    Outputs: ImportResult(added, skipped).
    Raises: ImportFormatError before anything is read or written.
    Side effects: One write of the merged, re-sorted collection.
    """
    incoming = parse_import(payload)
    with repo.lock:
        merged, result = merge_audits(repo.load(), incoming)
        repo.replace_all(merged)
    logger.info("Imported audits: %d added, %d skipped", result.added, result.skipped)
    return result
