"""Unit tests for export documents and the import/merge pipeline."""

import json
from datetime import date

import pytest

from storeaudit.config import AUDITS_KEY
from storeaudit.repository import AuditRepo
from storeaudit.storage import MemoryKeyValueStore
from storeaudit.transfer import (
    ImportFormatError,
    ImportResult,
    build_export,
    dump_export,
    export_audits,
    export_filename,
    import_audits,
    merge_audits,
    parse_import,
)

# ---- Export -------------------------------------------------------------------


def test_export_all(seeded_repo):
    doc = export_audits(seeded_repo, device_name="Tablet")
    assert doc["schema"] == "bt_3158_audits_export_v2"
    assert doc["exported_from_device"] == "Tablet"
    assert doc["filter"] == {"audit_type": "ALL"}
    assert [a["id"] for a in doc["audits"]] == ["c3", "b2", "a1"]
    assert doc["exported_at"]


def test_export_filtered_by_type(seeded_repo):
    doc = export_audits(seeded_repo, "Closing")
    assert doc["filter"] == {"audit_type": "Closing"}
    assert [a["id"] for a in doc["audits"]] == ["c3", "a1"]


def test_export_does_not_touch_store(kv, seeded_repo):
    raw = kv.get(AUDITS_KEY)
    export_audits(seeded_repo, "Opening")
    assert kv.get(AUDITS_KEY) == raw


def test_build_export_all_keyword_means_everything(make_record):
    doc = build_export([make_record("a"), make_record("b", audit_type="X")], "ALL", exported_at="t")
    assert len(doc["audits"]) == 2
    assert doc["exported_at"] == "t"


def test_dump_export_is_json(seeded_repo):
    doc = export_audits(seeded_repo)
    assert json.loads(dump_export(doc)) == doc


@pytest.mark.parametrize(
    "audit_type, expected",
    [
        (None, "bt3158_audits_all_2024-05-01.json"),
        ("ALL", "bt3158_audits_all_2024-05-01.json"),
        ("Closing", "bt3158_audits_closing_2024-05-01.json"),
        ("Night Shift / Beer", "bt3158_audits_night_shift_beer_2024-05-01.json"),
        ("!!!", "bt3158_audits_all_2024-05-01.json"),
    ],
)
def test_export_filename(audit_type, expected):
    assert export_filename(audit_type, on=date(2024, 5, 1)) == expected


# ---- Shape checks -----------------------------------------------------------------


def test_parse_accepts_bare_list_and_wrapped_document():
    assert parse_import("[]") == []
    assert parse_import('{"schema": "x", "audits": [{"id": "a"}]}') == [{"id": "a"}]
    assert parse_import(b'[{"id": "a"}]') == [{"id": "a"}]
    assert parse_import([{"id": "a"}]) == [{"id": "a"}]


@pytest.mark.parametrize("payload", ["{}", '{"audits": {}}', '"text"', "3", "not json", b"\xff\xfe", None])
def test_invalid_format_raises_and_does_not_write(kv, seeded_repo, payload):
    raw = kv.get(AUDITS_KEY)
    with pytest.raises(ImportFormatError):
        import_audits(seeded_repo, payload)
    assert kv.get(AUDITS_KEY) == raw


def test_import_format_error_is_value_error():
    assert issubclass(ImportFormatError, ValueError)


# ---- Merge ----------------------------------------------------------------------------


def test_import_duplicate_id_is_skipped(seeded_repo):
    payload = json.dumps([{"id": "a1", "created_at": "2023-01-01T00:00:00Z", "audit_type": "Audit", "items": []}])
    result = import_audits(seeded_repo, payload)
    assert result.to_dict() == {"added": 0, "skipped": 1}
    assert len(seeded_repo) == 3


def test_import_counts_with_intra_batch_duplicates(seeded_repo):
    incoming = [
        {"id": "n1", "created_at": "2023-02-01T00:00:00Z"},
        {"id": "b2", "created_at": "2023-01-02T00:00:00Z"},
        {"id": "n1", "created_at": "2023-02-01T00:00:00Z"},
        {"id": "n2", "created_at": "2023-02-02T00:00:00Z"},
    ]
    doc = {"schema": "bt_3158_audits_export_v2", "audits": incoming}
    result = import_audits(seeded_repo, json.dumps(doc))
    assert (result.added, result.skipped) == (2, 2)
    assert len(seeded_repo) == 3 + 2

    again = import_audits(seeded_repo, json.dumps(doc))
    assert (again.added, again.skipped) == (0, 4)
    assert len(seeded_repo) == 5


def test_import_sorts_newest_first_with_missing_dates_last(seeded_repo):
    incoming = [
        {"id": "undated"},
        {"id": "bad", "created_at": "yesterday"},
        {"id": "newest", "created_at": "2024-01-01T08:00:00.000Z"},
        {"id": "middle", "created_at": "2023-01-02T12:00:00+00:00"},
    ]
    import_audits(seeded_repo, incoming)
    assert [a.id for a in seeded_repo.load()] == ["newest", "c3", "middle", "b2", "a1", "undated", "bad"]


def test_import_sort_is_stable_for_equal_timestamps(repo):
    same = "2023-05-05T00:00:00Z"
    import_audits(repo, [{"id": "x", "created_at": same}, {"id": "y", "created_at": same}])
    import_audits(repo, [{"id": "z", "created_at": same}])
    assert [a.id for a in repo.load()] == ["x", "y", "z"]


def test_import_generates_missing_ids(repo):
    result = import_audits(repo, [{"audit_type": "Closing"}, {"id": "", "audit_type": "Closing"}])
    assert result.added == 2
    ids = [a.id for a in repo.load()]
    assert all(ids) and len(set(ids)) == 2


def test_import_skips_non_object_entries(repo):
    result = import_audits(repo, [1, "x", {"id": "ok"}])
    assert (result.added, result.skipped) == (1, 2)


def test_import_preserves_record_content(repo):
    entry = {
        "id": "r1",
        "created_at": "2023-03-03T00:00:00Z",
        "audit_type": "Shift",
        "auditor": "Lee",
        "audit_date": "2023-03-03",
        "audit_time": "14:00",
        "header_notes": "busy",
        "device_name": "Phone",
        "items": [{"label": "Q", "kind": "yn", "value": "", "notes": ""}],
        "domain_extension": {"cigarette_totals": [10, 20]},
    }
    import_audits(repo, [entry])
    assert repo.get("r1").to_dict() == entry


def test_merge_audits_leaves_existing_untouched(make_record):
    existing = [make_record("a")]
    merged, result = merge_audits(existing, [{"id": "b", "created_at": "2030-01-01T00:00:00Z"}])
    assert [a.id for a in merged] == ["b", "a"]
    assert [a.id for a in existing] == ["a"]
    assert result == ImportResult(added=1, skipped=0)


def test_export_then_import_into_other_device(seeded_repo):
    target = AuditRepo(MemoryKeyValueStore())
    doc = export_audits(seeded_repo, "Closing")
    result = import_audits(target, dump_export(doc))
    assert result.to_dict() == {"added": 2, "skipped": 0}
    assert [a.id for a in target.load()] == ["c3", "a1"]


def test_deeply_nested_document_is_a_format_error(kv, seeded_repo):
    raw = kv.get(AUDITS_KEY)
    with pytest.raises(ImportFormatError):
        import_audits(seeded_repo, "[" * 100000 + "]" * 100000)
    assert kv.get(AUDITS_KEY) == raw


def test_import_whitespace_type_groups_under_sentinel(repo):
    import_audits(repo, [{"id": "w1", "audit_type": "  ", "created_at": "2023-01-01T00:00:00Z"}])
    assert list(repo.group_by_type()) == ["Audit"]
