from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterator, Optional

from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from voice_intake.db import SessionFactory, db_session
from voice_intake.errors import StoreError, StoreUnavailableError
from voice_intake.models import PatientIntake, utcnow

logger = logging.getLogger(__name__)


@dataclass
class IntakeRecord:
    room_name: str
    intake: Dict[str, Any]
    updated_at: datetime
    notification_sent_at: Optional[datetime] = None

    @property
    def notified(self) -> bool:
        return self.notification_sent_at is not None


class IntakeStore(ABC):
    """
    Persistence for intake forms, keyed by room name.
    """

    @abstractmethod
    def get(self, room_name: str) -> Optional[IntakeRecord]:
        """
        Latest record for the room (by updated_at), or None.
        """
        ...

    @abstractmethod
    def upsert(self, room_name: str, intake: Dict[str, Any]) -> None:
        """
        Insert or replace the payload for the room. Leaves
        notification_sent_at alone.
        """
        ...

    @abstractmethod
    def mark_notified(self, room_name: str) -> bool:
        """
        Stamp notification_sent_at if it is still null.
        Returns True if this call set it.
        """
        ...


class SqlIntakeStore(IntakeStore):
    """
    SQLAlchemy-backed store. Every call uses its own session, so reads
    always see the latest committed state.
    """

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        try:
            with db_session(self.session_factory) as session:
                yield session
        except OperationalError as exc:
            logger.error("Intake store unreachable during %s: %s", action, exc)
            raise StoreUnavailableError(f"Intake storage unavailable: {exc.orig}") from exc
        except SQLAlchemyError as exc:
            logger.error("Intake store error during %s: %s", action, exc)
            detail = exc.orig if isinstance(exc, DBAPIError) else exc
            raise StoreError(f"Intake storage error: {detail}") from exc

    def get(self, room_name: str) -> Optional[IntakeRecord]:
        stmt = (
            select(PatientIntake)
            .where(PatientIntake.room_name == room_name)
            .order_by(PatientIntake.updated_at.desc())
            .limit(1)
        )
        with self._session("get") as session:
            row = session.scalars(stmt).first()
            if row is None:
                return None
            return IntakeRecord(
                room_name=row.room_name,
                intake=row.intake,
                updated_at=row.updated_at,
                notification_sent_at=row.notification_sent_at,
            )

    def upsert(self, room_name: str, intake: Dict[str, Any]) -> None:
        now = utcnow()
        with self._session("upsert") as session:
            dialect = session.get_bind().dialect.name
            if dialect in ("postgresql", "sqlite"):
                self._upsert_on_conflict(session, dialect, room_name, intake, now)
            else:
                self._upsert_select_then_write(session, room_name, intake, now)

    def _upsert_on_conflict(
        self,
        session: Session,
        dialect: str,
        room_name: str,
        intake: Dict[str, Any],
        now: datetime,
    ) -> None:
        insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
        stmt = insert(PatientIntake).values(
            room_name=room_name,
            intake=intake,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[PatientIntake.room_name],
            set_={
                "intake": stmt.excluded.intake,
                "updated_at": stmt.excluded.updated_at,
            },
        )
        session.execute(stmt)

    def _upsert_select_then_write(
        self,
        session: Session,
        room_name: str,
        intake: Dict[str, Any],
        now: datetime,
    ) -> None:
        existing = session.scalars(
            select(PatientIntake).where(PatientIntake.room_name == room_name)
        ).first()
        if existing is None:
            session.add(
                PatientIntake(
                    room_name=room_name,
                    intake=intake,
                    created_at=now,
                    updated_at=now,
                )
            )
        else:
            existing.intake = intake
            existing.updated_at = now

    def mark_notified(self, room_name: str) -> bool:
        stmt = (
            update(PatientIntake)
            .where(
                PatientIntake.room_name == room_name,
                PatientIntake.notification_sent_at.is_(None),
            )
            .values(notification_sent_at=utcnow())
        )
        with self._session("mark_notified") as session:
            result = session.execute(stmt)
            return result.rowcount > 0
