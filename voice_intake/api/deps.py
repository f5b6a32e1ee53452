"""
API dependencies.

Wires the store, the notification address lookup and the mail client into
the submission service. Tests swap any of these via
``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends

from voice_intake.config import get_settings
from voice_intake.db import open_session
from voice_intake.mail import MailClient, get_mail_client
from voice_intake.services import (
    IntakeStore,
    IntakeSubmissionService,
    NotificationAddressLookup,
    NotificationAddressSource,
    NotificationGate,
    RoomLocks,
    SqlIntakeStore,
)


@lru_cache(maxsize=1)
def get_room_locks() -> RoomLocks:
    # Shared by every request in this process.
    return RoomLocks()


def get_intake_store() -> IntakeStore:
    return SqlIntakeStore(open_session)


def get_address_source() -> NotificationAddressSource:
    settings = get_settings()
    return NotificationAddressLookup(
        open_session, fallback=settings.intake_notify_email
    )


def get_mailer() -> Optional[MailClient]:
    return get_mail_client()


def get_notification_gate(
    store: IntakeStore = Depends(get_intake_store),
    address_source: NotificationAddressSource = Depends(get_address_source),
    mail_client: Optional[MailClient] = Depends(get_mailer),
) -> NotificationGate:
    return NotificationGate(
        store=store,
        address_source=address_source,
        mail_client=mail_client,
        locks=get_room_locks(),
    )


def get_intake_service(
    store: IntakeStore = Depends(get_intake_store),
    gate: NotificationGate = Depends(get_notification_gate),
) -> IntakeSubmissionService:
    return IntakeSubmissionService(store=store, gate=gate)
