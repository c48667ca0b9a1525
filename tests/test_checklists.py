"""Unit tests for the built-in checklists."""

from storeaudit.builder import build_audit
from storeaudit.checklists import CHECKLISTS, checklist_names
from storeaudit.widgets import WIDGET_KINDS


def test_checklists_use_known_kinds():
    assert checklist_names() == ["Opening", "Shift", "Closing"]
    for checklist in CHECKLISTS.values():
        assert all(kind in WIDGET_KINDS for kind, _ in checklist.questions)


def test_instantiate_gives_fresh_unique_keys():
    checklist = CHECKLISTS["Shift"]
    first = checklist.instantiate()
    second = checklist.instantiate()
    keys = [w.key for w in first] + [w.key for w in second]
    assert len(keys) == len(set(keys))


def test_blank_form_builds_all_items_unanswered():
    checklist = CHECKLISTS["Closing"]
    layout = checklist.instantiate()
    submission = {"audit_type": checklist.audit_type}
    for widget in layout:
        submission.update(widget.fields({}))
    record = build_audit(submission, layout)
    assert record.audit_type == "Closing"
    assert record.items[0].label == "Sales Floor outs 10 or less?"
    assert all(i.value == "" for i in record.items if i.kind == "yn")
    # layout-driven and discovery-driven decoding agree
    assert build_audit(submission).items == record.items
