from __future__ import annotations

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import pytest

from voice_intake.db import db_session
from voice_intake.errors import StoreError, StoreUnavailableError
from voice_intake.models import PatientIntake, utcnow
from voice_intake.services import SqlIntakeStore


def test_get_unknown_room_returns_none(store):
    assert store.get("missing-room") is None


def test_upsert_then_get_returns_payload_verbatim(store):
    payload = {
        "patient": {"first_name": "Ana", "last_name": "Silva"},
        "medications": {"current": ["ibuprofen", "metformin"]},
        "allergies": {"penicillin": True},
    }
    store.upsert("r1", payload)

    record = store.get("r1")
    assert record is not None
    assert record.room_name == "r1"
    assert record.intake == payload
    assert record.notification_sent_at is None
    assert not record.notified


def test_upsert_replaces_payload_and_keeps_single_row(store, session_factory):
    store.upsert("r1", {"patient": {"first_name": "Ana"}})
    first = store.get("r1")
    store.upsert("r1", {"patient": {"first_name": "Anabel"}})
    second = store.get("r1")

    assert second.intake == {"patient": {"first_name": "Anabel"}}
    assert second.updated_at >= first.updated_at

    with db_session(session_factory) as session:
        assert session.query(PatientIntake).filter_by(room_name="r1").count() == 1


def test_mark_notified_sets_timestamp_once(store):
    store.upsert("r1", {"patient": {}})

    assert store.mark_notified("r1") is True
    stamped = store.get("r1").notification_sent_at
    assert stamped is not None

    assert store.mark_notified("r1") is False
    assert store.get("r1").notification_sent_at == stamped


def test_upsert_does_not_clear_notification_flag(store):
    store.upsert("r1", {"patient": {"first_name": "Ana"}})
    store.mark_notified("r1")
    stamped = store.get("r1").notification_sent_at

    store.upsert("r1", {"patient": {"first_name": "Ana", "last_name": "Silva"}})

    record = store.get("r1")
    assert record.notification_sent_at == stamped
    assert record.intake["patient"]["last_name"] == "Silva"


def test_mark_notified_for_unknown_room_is_a_noop(store):
    assert store.mark_notified("nobody") is False
    assert store.get("nobody") is None


def test_rooms_are_independent(store):
    store.upsert("r1", {"patient": {"first_name": "Ana"}})
    store.upsert("r2", {"patient": {"first_name": "Ben"}})
    store.mark_notified("r1")

    assert store.get("r1").notified
    assert not store.get("r2").notified


def test_select_then_write_fallback(store, session_factory):
    # Path used on dialects without INSERT ... ON CONFLICT.
    with db_session(session_factory) as session:
        store._upsert_select_then_write(session, "r9", {"v": 1}, utcnow())
    with db_session(session_factory) as session:
        store._upsert_select_then_write(session, "r9", {"v": 2}, utcnow())

    assert store.get("r9").intake == {"v": 2}


def test_unreachable_database_raises_store_unavailable(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path}/missing-dir/intake.sqlite", future=True)
    store = SqlIntakeStore(sessionmaker(bind=engine, future=True))

    with pytest.raises(StoreUnavailableError):
        store.get("r1")


def test_missing_table_raises_store_error():
    engine = create_engine("sqlite://", future=True)
    store = SqlIntakeStore(sessionmaker(bind=engine, future=True))

    # No init_db: the table does not exist.
    with pytest.raises(StoreError):
        store.upsert("r1", {"patient": {}})
