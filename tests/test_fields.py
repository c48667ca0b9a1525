"""Unit tests for the flat field naming convention."""

from storeaudit.fields import field_name, field_value, new_instance_key, scan_instance_keys


def test_field_name_joins_parts():
    assert field_name("ab12", "notes") == "ab12_notes"
    assert field_name("ab12", "sf", "yn") == "ab12_sf_yn"


def test_field_value_missing_is_empty_string():
    assert field_value({}, "k_yn") == ""
    assert field_value({"k_yn": None}, "k_yn") == ""
    assert field_value({"k_yn": "No"}, "k_yn") == "No"


def test_new_instance_keys_do_not_repeat():
    keys = {new_instance_key() for _ in range(500)}
    assert len(keys) == 500


def test_scan_finds_type_fields_in_submission_order():
    submission = {
        "k2_label": "Second",
        "k2_type": "notes",
        "k1_type": "yn",
        "stray_field": "x",
        "k1_yn": "Yes",
    }
    assert list(scan_instance_keys(submission)) == [("k2", "notes"), ("k1", "yn")]


def test_scan_ignores_bare_type_field():
    assert list(scan_instance_keys({"_type": "yn", "type": "yn"})) == []


def test_scan_reports_header_audit_type_as_instance():
    # "audit_type" also ends in "_type"; filtering unknown kinds is the catalog's job
    assert list(scan_instance_keys({"audit_type": "Closing"})) == [("audit", "Closing")]
