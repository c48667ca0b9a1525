"""
Design (checklists.py)
- Purpose: Built-in audit forms. A checklist is an audit type plus an ordered list of
           (widget kind, label) declarations; instantiate() turns it into a fresh widget layout
           for one rendering of the form.
- Inputs: Checklist name.
- Outputs: Checklist objects; widget layouts with fresh instance keys.
- Side effects: None.
- Thread-safety: Read-only data.
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

from .fields import new_instance_key
from .widgets import NotesWidget, OutsWidget, Widget, YesNoNAWidget, YesNoWidget, widget_for


@dataclass(frozen=True)
class Checklist:
    audit_type: str
    questions: Tuple[Tuple[str, str], ...]

    def instantiate(self) -> List[Widget]:
        """Fresh layout: every widget gets its own new instance key."""
        return [widget_for(kind, new_instance_key(), label) for kind, label in self.questions]


YN = YesNoWidget.kind
YNNA = YesNoNAWidget.kind
NOTES = NotesWidget.kind
OUTS = OutsWidget.kind

CHECKLISTS: Dict[str, Checklist] = {
    c.audit_type: c
    for c in (
        Checklist(
            "Opening",
            (
                (YN, "Store unlocked and alarm disarmed on time?"),
                (YN, "Registers counted and balanced?"),
                (YN, "Cooler temp OK?"),
                (YNNA, "Fuel pumps on and price signs correct?"),
                (YN, "Restrooms clean and stocked?"),
                (NOTES, "Opening notes"),
            ),
        ),
        Checklist(
            "Shift",
            (
                (OUTS, ""),
                (YN, "Coffee and fountain stations clean and full?"),
                (YN, "Hot food case stocked and labeled?"),
                (YN, "Cigarette count matches?"),
                (YNNA, "Lottery tickets reconciled?"),
                (YN, "Lot and entrance free of trash?"),
                (NOTES, "Shift notes"),
            ),
        ),
        Checklist(
            "Closing",
            (
                (OUTS, ""),
                (YN, "Safe drop completed?"),
                (YN, "Floors swept and mopped?"),
                (YN, "Cooler doors closed and sealed?"),
                (YNNA, "Car wash shut down?"),
                (YN, "Doors locked and alarm set?"),
                (NOTES, "Closing notes"),
            ),
        ),
    )
}


def checklist_names() -> List[str]:
    return list(CHECKLISTS)
