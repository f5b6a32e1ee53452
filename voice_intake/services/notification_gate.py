from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from voice_intake.errors import SendError
from voice_intake.intake.summary import build_intake_summary
from voice_intake.mail import MailClient, OutgoingEmail
from voice_intake.services.intake_store import IntakeStore
from voice_intake.services.notification_address import NotificationAddressSource

logger = logging.getLogger(__name__)


class NotifyOutcome(str, Enum):
    SENT = "sent"
    FAILED = "failed"
    SKIPPED_NO_ADDRESS = "skipped_no_address"
    SKIPPED_NO_MAILER = "skipped_no_mailer"
    SKIPPED_ALREADY_SENT = "skipped_already_sent"


class RoomLocks:
    """
    One lock per room name, dropped again once no caller holds or waits on it.
    """

    def __init__(self):
        self._guard = threading.Lock()
        # room_name -> [lock, number of holders/waiters]
        self._locks: Dict[str, List[Any]] = {}

    @contextmanager
    def hold(self, room_name: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(room_name)
            if entry is None:
                entry = self._locks[room_name] = [threading.Lock(), 0]
            entry[1] += 1

        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[room_name]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


class NotificationGate:
    """
    Sends at most one intake summary email per room.

    The flow is check (notification_sent_at), send, then mark. Inside one
    process the three steps run under a per-room lock, so a UI submission
    and an agent submission racing for the same room cannot both send.
    Separate worker processes do not share these locks.

    A failed send leaves the room unsent; the next submission retries.
    Store errors propagate to the caller.
    """

    def __init__(
        self,
        store: IntakeStore,
        address_source: NotificationAddressSource,
        mail_client: Optional[MailClient],
        locks: Optional[RoomLocks] = None,
    ):
        self.store = store
        self.address_source = address_source
        self.mail_client = mail_client
        self.locks = locks or RoomLocks()

    def maybe_notify(self, room_name: str, intake: Dict[str, Any]) -> NotifyOutcome:
        address = self.address_source.get_notification_address()
        if not address:
            logger.info("No notification address configured; skipping email for room %s", room_name)
            return NotifyOutcome.SKIPPED_NO_ADDRESS

        if self.mail_client is None:
            logger.warning("No mail client configured; skipping email for room %s", room_name)
            return NotifyOutcome.SKIPPED_NO_MAILER

        with self.locks.hold(room_name):
            record = self.store.get(room_name)
            if record is not None and record.notified:
                logger.debug(
                    "Notification for room %s already sent at %s",
                    room_name,
                    record.notification_sent_at,
                )
                return NotifyOutcome.SKIPPED_ALREADY_SENT

            summary = build_intake_summary(intake, room_name)
            message = OutgoingEmail(
                to=address,
                subject=summary.subject,
                html=summary.html,
                text=summary.text,
            )

            try:
                self.mail_client.send(message)
            except SendError as exc:
                logger.error("Intake email notification failed for room %s: %s", room_name, exc)
                return NotifyOutcome.FAILED

            self.store.mark_notified(room_name)
            logger.info("Intake notification sent for room %s to %s", room_name, address)
            return NotifyOutcome.SENT
