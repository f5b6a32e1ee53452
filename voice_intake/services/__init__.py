from .intake_store import IntakeRecord, IntakeStore, SqlIntakeStore
from .notification_address import (
    NotificationAddressLookup,
    NotificationAddressSource,
    SettingsAddressLookup,
)
from .notification_gate import NotificationGate, NotifyOutcome, RoomLocks
from .intake_service import IntakeSubmissionService

__all__ = [
    "IntakeRecord",
    "IntakeStore",
    "SqlIntakeStore",
    "NotificationAddressLookup",
    "NotificationAddressSource",
    "SettingsAddressLookup",
    "NotificationGate",
    "NotifyOutcome",
    "RoomLocks",
    "IntakeSubmissionService",
]
