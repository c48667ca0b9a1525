"""
Design (utils.py)
- Purpose: Reusable helpers: id generation, timestamps, filename normalization,
           and desktop notifications.
- Inputs: Various helper parameters (timestamps, audit types, messages).
- Outputs: Helper results (strings, datetimes).
- Side effects: notify() shows an OS notification via plyer.
- Thread-safety: Stateless; safe to call from any thread.
"""

import logging
import re
import secrets
import time
from datetime import datetime, timezone

from plyer import notification

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def uid() -> str:
    """
    Purpose: Generate a fresh record or widget-instance identifier.
    Outputs: "<random hex>-<millisecond clock in hex>", e.g. "9f1c2ab04e7d-18b3c0f2a10".
    """
    return f"{secrets.token_hex(6)}-{int(time.time() * 1000):x}"


def now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value) -> datetime:
    """
    Purpose: Parse a stored created_at value for sorting.
    Outputs: Aware datetime; EPOCH when missing or unparsable. Naive values are taken as UTC.
    """
    if not isinstance(value, str) or not value.strip():
        return EPOCH
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_created(value: str) -> str:
    """
    Purpose: Render a created_at timestamp in local time for history rows.
    Outputs: "YYYY-MM-DD HH:MM:SS" local time; the raw value when it cannot be parsed.
    """
    parsed = parse_timestamp(value)
    if parsed is EPOCH:
        return value or ""
    return parsed.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def normalize_for_filename(text: str) -> str:
    """
    Purpose: Turn an audit type into a filename-safe slug.
    Outputs: Lowercase; runs of non-alphanumerics collapsed to "_"; "" if nothing remains.
    """
    return re.sub(r"[^a-z0-9]+", "_", (text or "").strip().lower()).strip("_")


def notify(title: str, message: str) -> None:
    """
    Purpose: Show a desktop notification.
    Side Effects: OS notification; failures (no backend on this platform) are logged only.
    """
    try:
        notification.notify(title=title, message=message, timeout=5)
    except Exception:
        logger.warning("Desktop notification failed: %s", title, exc_info=True)
