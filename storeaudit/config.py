"""
Design (config.py)
- Purpose: Centralize constants and configuration.
- Inputs: None.
- Outputs: Constants (storage keys, schema tags, labels, UI limits).
- Side effects: None.
- Thread-safety: N/A (read-only constants).
"""

# maximum number of log lines kept in the Logs panel (oldest trimmed)
LOG_MAX_LINES = 1000

# Persistence: keys inside the key-value store, and the file backing it (path resolved in storage module)
AUDITS_KEY = "bt_3158_audits_v1"
DEVICE_NAME_KEY = "bt_3158_device_name"
DATA_FILENAME = "audits.json"
DATA_PATH_ENV = "STORE_AUDIT_DATA"

# Audit type used when the form leaves it blank
DEFAULT_AUDIT_TYPE = "Audit"

## Export documents
EXPORT_SCHEMA = "bt_3158_audits_export_v2"
EXPORT_FILENAME_PREFIX = "bt3158_audits"
EXPORT_ALL = "ALL"

## Yes/No answers
YES = "Yes"
NO = "No"
NA = "N/A"
YN_CHOICES = (YES, NO)
YNNA_CHOICES = (YES, NO, NA)

# Shown wherever a value or note is blank
BLANK_DISPLAY = "—"

# Outs composite rows: (row suffix, fixed label)
OUTS_ROWS = (
    ("sf", "Sales Floor outs 10 or less?"),
    ("cool", "Cooler outs 10 or less?"),
    ("beer", "Beer outs 10 or less?"),
)
OUTS_TITLE = "Outs 10 or less?"
OUTS_NOTES_LABEL = "Outs notes"

# Header fields read from every submission
HEADER_FIELDS = ("audit_type", "auditor", "audit_date", "audit_time", "header_notes")

APP_TITLE = "Store Audits"
