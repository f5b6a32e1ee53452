from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from voice_intake.services.intake_store import IntakeStore
from voice_intake.services.notification_gate import NotificationGate, NotifyOutcome

logger = logging.getLogger(__name__)


class IntakeSubmissionService:
    """
    Service that coordinates:
      - persisting the intake form for a room
      - running the notification gate once the write has committed
    """

    def __init__(self, store: IntakeStore, gate: NotificationGate):
        self.store = store
        self.gate = gate

    def submit(self, room_name: str, intake: Dict[str, Any]) -> NotifyOutcome:
        """
        Upsert the intake, then try to notify.

        A store failure raises before the gate runs; mail failures are
        reported through the returned outcome only.
        """
        self.store.upsert(room_name, intake)
        logger.info("Stored intake for room %s", room_name)
        return self.gate.maybe_notify(room_name, intake)

    def latest(self, room_name: str) -> Optional[Dict[str, Any]]:
        record = self.store.get(room_name)
        if record is None:
            return None
        return record.intake
