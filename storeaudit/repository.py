"""
Design (repository.py)
- Purpose: Encapsulate the audit collection behind a tiny API (and a lock), so the UI and the
           import pipeline never touch the key-value store directly.
- Inputs: AuditRecord objects and ids.
- Outputs: Fresh lists of records (newest first) and per-type groupings.
- Side effects: Every mutation reads the full collection, changes it in memory and writes it
                back once. Nothing is cached between calls.
- Thread-safety: Read-mutate-write cycles hold the internal lock (in-process only; two app
                 instances sharing one file can still lose updates).
"""

import logging
import threading
from typing import Dict, List, Optional

from .config import DEFAULT_AUDIT_TYPE
from .models import AuditRecord
from .storage import KeyValueStore, load_audits, save_audits

logger = logging.getLogger(__name__)


class AuditRepo:
    """
    Design (AuditRepo)
    - State:
        kv: KeyValueStore holding the JSON-encoded collection
        lock: threading.RLock guarding each read-mutate-write cycle (re-entrant, so callers
              doing their own multi-step cycle, like import, can hold it around load/replace_all)
    - Order: newest first. append() inserts at the front; import re-sorts by created_at.
    """

    def __init__(self, kv: KeyValueStore) -> None:
        self.kv = kv
        self.lock = threading.RLock()

    # -------- Reads --------

    def load(self) -> List[AuditRecord]:
        """
        Purpose: Return the full collection as stored.
        Outputs: list[AuditRecord]; [] when storage is missing or corrupt (never raises).
        """
        with self.lock:
            return load_audits(self.kv)

    def get(self, audit_id: str) -> Optional[AuditRecord]:
        for record in self.load():
            if record.id == audit_id:
                return record
        return None

    def group_by_type(self) -> Dict[str, List[AuditRecord]]:
        """
        Purpose: Partition the collection by audit_type for the history view.
        Outputs: {audit_type: [records]} with keys in case-insensitive alphabetical order;
                 records keep store order (newest first). Blank types group under "Audit".
        """
        groups: Dict[str, List[AuditRecord]] = {}
        for record in self.load():
            groups.setdefault(record.audit_type or DEFAULT_AUDIT_TYPE, []).append(record)
        return {t: groups[t] for t in sorted(groups, key=lambda t: (t.casefold(), t))}

    def __len__(self) -> int:
        return len(self.load())

    # -------- Mutations --------

    def append(self, record: AuditRecord) -> None:
        """
        Purpose: Store a newly built record at the front (newest first).
        Notes: No uniqueness check; build_audit() always issues a fresh id.
        """
        with self.lock:
            audits = load_audits(self.kv)
            audits.insert(0, record)
            save_audits(self.kv, audits)
        logger.info("Saved %s audit %s", record.audit_type, record.id)

    def remove(self, audit_id: str) -> bool:
        """
        Purpose: Delete one record by id.
        Outputs: True if a record was removed. An unknown id is a no-op and nothing is written.
        """
        with self.lock:
            audits = load_audits(self.kv)
            kept = [a for a in audits if a.id != audit_id]
            if len(kept) == len(audits):
                return False
            save_audits(self.kv, kept)
        logger.info("Deleted audit %s", audit_id)
        return True

    def clear(self) -> None:
        """Remove every record."""
        with self.lock:
            save_audits(self.kv, [])
        logger.info("Deleted all audits")

    def replace_all(self, audits: List[AuditRecord]) -> None:
        """Write a complete, already-merged collection in one go."""
        with self.lock:
            save_audits(self.kv, audits)
