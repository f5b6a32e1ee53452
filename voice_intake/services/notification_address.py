from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from voice_intake.db import SessionFactory, db_session
from voice_intake.models import NotificationSetting

logger = logging.getLogger(__name__)


class NotificationAddressSource(ABC):
    @abstractmethod
    def get_notification_address(self) -> Optional[str]:
        """
        Destination for intake summary emails, or None when disabled.
        """
        ...


class SettingsAddressLookup(NotificationAddressSource):
    """
    Fixed address taken from INTAKE_NOTIFY_EMAIL.
    """

    def __init__(self, address: Optional[str]):
        self.address = (address or "").strip() or None

    def get_notification_address(self) -> Optional[str]:
        return self.address


class NotificationAddressLookup(NotificationAddressSource):
    """
    Reads the newest row of notification_settings, falling back to the
    configured INTAKE_NOTIFY_EMAIL when the table is empty.

    Lookup failures are logged and treated as "no address": a broken
    settings table must not fail an intake submission.
    """

    def __init__(self, session_factory: SessionFactory, fallback: Optional[str] = None):
        self.session_factory = session_factory
        self.fallback = SettingsAddressLookup(fallback)

    def get_notification_address(self) -> Optional[str]:
        stmt = (
            select(NotificationSetting.email)
            .order_by(NotificationSetting.created_at.desc(), NotificationSetting.id.desc())
            .limit(1)
        )
        try:
            with db_session(self.session_factory) as session:
                email = session.scalars(stmt).first()
        except SQLAlchemyError as exc:
            logger.warning("Could not read notification_settings: %s", exc)
            email = None

        if email and email.strip():
            return email.strip()
        return self.fallback.get_notification_address()
