"""
Design (fields.py)
- Purpose: The flat field naming convention shared by rendered forms and the record builder.
           Each widget instance owns a fresh key; its fields are "{key}_{suffix}".
- Inputs: Instance keys, suffix parts, flat submissions (Mapping[str, str]).
- Outputs: Field names, field values, and (instance key, declared type) pairs.
- Side effects: None.
- Thread-safety: Stateless; safe to call from any thread.
"""

from typing import Iterator, Mapping, Tuple

from .utils import uid

LABEL = "label"
TYPE = "type"
NOTES = "notes"
YN = "yn"

TYPE_SUFFIX = "_" + TYPE


def new_instance_key() -> str:
    """Fresh opaque key for one rendered widget instance."""
    return uid()


def field_name(key: str, *parts: str) -> str:
    """
    Purpose: Build a flat field name from an instance key and suffix parts.
    Example: field_name("ab12", "sf", "yn") -> "ab12_sf_yn"
    """
    return "_".join((key,) + parts)


def field_value(submission: Mapping[str, str], name: str) -> str:
    """
    Purpose: Read one field from a submission.
    Outputs: The value as a string; "" when the field is absent or None
             (an unselected radio group submits nothing, and must read as unanswered).
    """
    value = submission.get(name)
    if value is None:
        return ""
    return str(value)


def scan_instance_keys(submission: Mapping[str, str]) -> Iterator[Tuple[str, str]]:
    """
    Purpose: Recover widget instances from a submission that arrived without a layout.
    Outputs: (instance_key, declared_type) for every field ending in "_type", in submission order.
    Notes: Fields without a "_type" companion are never treated as widgets.
    """
    for name, value in submission.items():
        if not name.endswith(TYPE_SUFFIX):
            continue
        key = name[: -len(TYPE_SUFFIX)]
        if not key:
            continue
        yield key, field_value(submission, name)
