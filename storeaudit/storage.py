"""
Design (storage.py)
- Purpose: Persistence port for audits. A tiny key-value interface (get/set of strings) with
           an in-memory backend and a JSON-file backend, plus load/save of the audit
           collection and the device name on top of it.
- Inputs: A KeyValueStore; list of AuditRecord for save.
- Outputs: list[AuditRecord] on load; None on save.
- Side effects: JsonFileKeyValueStore reads/writes one file. On read failure the value reads as
                missing; on write failure the error is logged and ignored.
- Contract: load_audits() never raises. A missing, unparsable or non-list value loads as [].
- Thread-safety: Call through AuditRepo, which serializes read-mutate-write cycles.
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from .config import AUDITS_KEY, DATA_FILENAME, DATA_PATH_ENV, DEVICE_NAME_KEY
from .models import AuditRecord

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryKeyValueStore:
    """Dict-backed store; used by tests and as a scratch backend."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileKeyValueStore:
    """
    Design (JsonFileKeyValueStore)
    - State: path to a JSON object file {key: string}. Re-read on every get() so edits made
             by another window are picked up on the next read (no locking across processes).
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError, RecursionError):
            logger.warning("Could not read %s; treating it as empty", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring %s: top level is not an object", self.path)
            return {}
        return data

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except OSError:
            logger.error("Could not write %s", self.path, exc_info=True)


def get_data_path() -> Path:
    """
    Resolve path for audits.json. STORE_AUDIT_DATA wins when set. Otherwise prefer the app data
    dir so it works when installed and survives reinstalls; fallback to dir next to executable.
    """
    override = os.environ.get(DATA_PATH_ENV)
    if override:
        return Path(override)
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            base = Path(appdata) / "Store Audits"
            try:
                base.mkdir(parents=True, exist_ok=True)
                return base / DATA_FILENAME
            except OSError:
                pass
    # Fallback: next to executable (or project root when running as script)
    if getattr(sys, "frozen", False) and hasattr(sys, "_MEIPASS"):
        base = Path(sys.executable).parent
    else:
        base = Path(__file__).resolve().parent.parent
    return base / DATA_FILENAME


def load_audits(kv: KeyValueStore) -> List[AuditRecord]:
    """
    Load the audit collection. Returns empty list on missing value, parse error, or a value
    that is not a JSON array. Entries that are not objects are dropped.
    """
    raw = kv.get(AUDITS_KEY)
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except (TypeError, ValueError, RecursionError):
        logger.warning("Stored audits are not valid JSON; starting from an empty list")
        return []
    if not isinstance(data, list):
        logger.warning("Stored audits are not a list; starting from an empty list")
        return []
    return [AuditRecord.from_dict(item) for item in data if isinstance(item, dict)]


def save_audits(kv: KeyValueStore, audits: List[AuditRecord]) -> None:
    """Write the whole collection back under the audits key."""
    kv.set(AUDITS_KEY, json.dumps([a.to_dict() for a in audits], ensure_ascii=False))


def get_device_name(kv: KeyValueStore) -> str:
    return kv.get(DEVICE_NAME_KEY) or ""


def set_device_name(kv: KeyValueStore, name: str) -> None:
    kv.set(DEVICE_NAME_KEY, (name or "").strip())
