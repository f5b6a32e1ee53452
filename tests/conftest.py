from __future__ import annotations

import threading
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from voice_intake.api.deps import get_address_source, get_intake_store, get_mailer
from voice_intake.db import init_db
from voice_intake.errors import SendError
from voice_intake.mail import MailClient, OutgoingEmail
from voice_intake.main import app
from voice_intake.services import IntakeRecord, IntakeStore, SettingsAddressLookup, SqlIntakeStore

NOTIFY_ADDRESS = "frontdesk@clinic.test"


class FakeMailClient(MailClient):
    def __init__(self, fail: bool = False, delay: float = 0.0):
        self.fail = fail
        self.delay = delay
        self.attempts = 0
        self.sent: List[OutgoingEmail] = []
        self._lock = threading.Lock()

    def send(self, message: OutgoingEmail) -> None:
        with self._lock:
            self.attempts += 1
        if self.delay:
            time.sleep(self.delay)
        if self.fail:
            raise SendError("mail provider rejected the message")
        with self._lock:
            self.sent.append(message)


class InMemoryIntakeStore(IntakeStore):
    """
    Thread-safe store used where SQLite's single shared connection would
    get in the way (concurrent submissions).
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.records: Dict[str, IntakeRecord] = {}

    def get(self, room_name: str) -> Optional[IntakeRecord]:
        with self._lock:
            record = self.records.get(room_name)
            if record is None:
                return None
            return IntakeRecord(
                room_name=record.room_name,
                intake=record.intake,
                updated_at=record.updated_at,
                notification_sent_at=record.notification_sent_at,
            )

    def upsert(self, room_name: str, intake: Dict[str, Any]) -> None:
        now = datetime.now(timezone.utc)
        with self._lock:
            existing = self.records.get(room_name)
            self.records[room_name] = IntakeRecord(
                room_name=room_name,
                intake=intake,
                updated_at=now,
                notification_sent_at=existing.notification_sent_at if existing else None,
            )

    def mark_notified(self, room_name: str) -> bool:
        with self._lock:
            record = self.records.get(room_name)
            if record is None or record.notification_sent_at is not None:
                return False
            record.notification_sent_at = datetime.now(timezone.utc)
            return True


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def store(session_factory) -> SqlIntakeStore:
    return SqlIntakeStore(session_factory)


@pytest.fixture
def mail_client() -> FakeMailClient:
    return FakeMailClient()


@pytest.fixture
def address_source() -> SettingsAddressLookup:
    return SettingsAddressLookup(NOTIFY_ADDRESS)


@pytest.fixture
def make_client():
    def _make(store: IntakeStore, address_source, mail_client) -> TestClient:
        app.dependency_overrides[get_intake_store] = lambda: store
        app.dependency_overrides[get_address_source] = lambda: address_source
        app.dependency_overrides[get_mailer] = lambda: mail_client
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client, store, address_source, mail_client) -> TestClient:
    return make_client(store, address_source, mail_client)
