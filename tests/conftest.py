"""Shared fixtures: an in-memory key-value store and a repository over it."""

import json

import pytest

from storeaudit.config import AUDITS_KEY
from storeaudit.models import AuditItem, AuditRecord
from storeaudit.repository import AuditRepo
from storeaudit.storage import MemoryKeyValueStore


@pytest.fixture
def kv():
    return MemoryKeyValueStore()


@pytest.fixture
def repo(kv):
    return AuditRepo(kv)


@pytest.fixture
def make_record():
    def _make(audit_id, created_at="2023-01-01T00:00:00Z", audit_type="Audit", **kwargs):
        return AuditRecord(id=audit_id, created_at=created_at, audit_type=audit_type, **kwargs)

    return _make


@pytest.fixture
def seeded_repo(kv, repo):
    """Repository holding three audits, newest first, stored as raw JSON."""
    records = [
        AuditRecord(id="c3", created_at="2023-01-03T00:00:00Z", audit_type="Closing",
                    items=[AuditItem.yn("Doors locked?", "Yes")]),
        AuditRecord(id="b2", created_at="2023-01-02T00:00:00Z", audit_type="Opening"),
        AuditRecord(id="a1", created_at="2023-01-01T00:00:00Z", audit_type="Closing"),
    ]
    kv.set(AUDITS_KEY, json.dumps([r.to_dict() for r in records]))
    return repo
