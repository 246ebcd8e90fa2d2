# ABOUTME: Tests for document attachment resolution
# ABOUTME: Validates remembered ids, scope precedence, ambient documents and trashed-document recovery

import pytest

from classlog.models.database import CacheEntry
from classlog.models.errors import NotAttached
from classlog.services.attachment import DOCUMENT_ID_KEY


def test_resolve_returns_none_when_nothing_attached(classroom):
    assert classroom.attachment.resolve() is None


def test_resolve_or_fail_raises_not_attached(classroom):
    with pytest.raises(NotAttached) as exc_info:
        classroom.attachment.resolve_or_fail()
    assert "build sheets" in exc_info.value.message


def test_create_remembers_in_both_scopes_and_bumps_version(classroom):
    doc = classroom.attachment.create("Room 12")

    assert classroom.user_properties.get(DOCUMENT_ID_KEY) == doc.id
    assert classroom.document_properties.get(DOCUMENT_ID_KEY) == doc.id
    assert classroom.versions.get_version(doc.id) == 1
    assert classroom.attachment.resolve().id == doc.id
    assert classroom.attachment.resolve().name == "Room 12"


def test_user_scope_takes_precedence(classroom):
    first = classroom.attachment.create("First")
    second = classroom.workbooks.create("Second")
    classroom.document_properties.set(DOCUMENT_ID_KEY, second.id)

    assert classroom.attachment.resolve().id == first.id


def test_document_scope_used_when_user_scope_empty(classroom):
    doc = classroom.workbooks.create("Shared")
    classroom.document_properties.set(DOCUMENT_ID_KEY, doc.id)

    assert classroom.attachment.resolve().id == doc.id


def test_trashed_document_is_purged_and_forgotten(sample_class, db_session):
    doc = sample_class.attachment.resolve()
    sample_class.queries.get_data()
    sample_class.queries.get_counts_snapshot("P1")
    assert db_session.query(CacheEntry).filter_by(doc_id=doc.id).count() == 2
    assert sample_class.versions.get_version(doc.id) > 0

    sample_class.workbooks.trash(doc.id)

    assert sample_class.attachment.resolve() is None
    assert sample_class.user_properties.get(DOCUMENT_ID_KEY) is None
    assert sample_class.document_properties.get(DOCUMENT_ID_KEY) is None
    assert sample_class.versions.get_version(doc.id) == 0
    assert db_session.query(CacheEntry).filter_by(doc_id=doc.id).count() == 0

    state = sample_class.queries.get_app_state()
    assert state["attached"] is False
    assert state["doc_id"] is None


def test_indeterminate_trash_status_counts_as_usable(attached, monkeypatch):
    doc = attached.attachment.resolve()
    monkeypatch.setattr(attached.workbooks, "is_trashed", lambda doc_id: None)

    resolved = attached.attachment.resolve()

    assert resolved is not None
    assert resolved.id == doc.id
    assert attached.user_properties.get(DOCUMENT_ID_KEY) == doc.id


def test_ambient_document_is_attached_and_remembered(classroom):
    doc = classroom.workbooks.create("Active")
    classroom.attachment.active_document_id = doc.id

    resolved = classroom.attachment.resolve()

    assert resolved.id == doc.id
    assert classroom.user_properties.get(DOCUMENT_ID_KEY) == doc.id


def test_trashed_ambient_document_is_ignored(classroom):
    doc = classroom.workbooks.create("Active")
    classroom.workbooks.trash(doc.id)
    classroom.attachment.active_document_id = doc.id

    assert classroom.attachment.resolve() is None
    assert classroom.user_properties.get(DOCUMENT_ID_KEY) is None


def test_falls_through_to_ambient_after_trash(classroom):
    old = classroom.attachment.create("Old")
    fresh = classroom.workbooks.create("Fresh")
    classroom.attachment.active_document_id = fresh.id
    classroom.workbooks.trash(old.id)

    assert classroom.attachment.resolve().id == fresh.id
