"""Persistence for appointments and categories.

Two stores share one interface: ``DatabaseStore`` talks to SQLAlchemy and
``MemoryStore`` keeps everything in process, which is handy for local
development and tests. ``build_store`` picks one from configuration at
startup; nothing else should construct a store implicitly.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from itertools import count
from threading import Lock

from sqlalchemy import or_
from sqlalchemy.orm import Session, sessionmaker

from backend.core import config
from backend.database import (
    DEFAULT_CATEGORIES,
    Base,
    SessionLocal,
    engine,
    ensure_appointment_schema,
    seed_default_categories,
)
from backend.models.appointment import Appointment
from backend.models.category import Category

logger = logging.getLogger(__name__)

APPOINTMENT_FIELDS = ('title', 'description', 'start_time', 'end_time', 'category_id', 'email')


class AppointmentNotFoundError(LookupError):
    def __init__(self, appointment_id: int):
        super().__init__(f'Appointment {appointment_id} not found')
        self.appointment_id = appointment_id


def _writable_fields(values: dict) -> dict:
    # notification_sent is owned by the reminder scheduler
    return {key: value for key, value in values.items() if key in APPOINTMENT_FIELDS}


class AppointmentStore(ABC):
    @abstractmethod
    def list_categories(self) -> list[Category]: ...

    @abstractmethod
    def create_category(self, name: str, color: str) -> Category: ...

    @abstractmethod
    def delete_category(self, category_id: int) -> None: ...

    @abstractmethod
    def list_appointments(self) -> list[Appointment]: ...

    @abstractmethod
    def list_appointments_in_range(self, start: datetime, end: datetime) -> list[Appointment]:
        """Appointments starting within ``[start, end]``, both bounds inclusive."""

    @abstractmethod
    def get_appointment(self, appointment_id: int) -> Appointment | None: ...

    @abstractmethod
    def create_appointment(self, values: dict) -> Appointment: ...

    @abstractmethod
    def update_appointment(self, appointment_id: int, values: dict) -> Appointment: ...

    @abstractmethod
    def delete_appointment(self, appointment_id: int) -> None: ...

    @abstractmethod
    def list_pending_notification(self) -> list[Appointment]:
        """Appointments whose reminder has not been sent yet."""

    @abstractmethod
    def set_notified(self, appointment_id: int) -> None: ...


class MemoryStore(AppointmentStore):
    def __init__(self, seed_categories: bool = True):
        self._lock = Lock()
        self._categories: dict[int, Category] = {}
        self._appointments: dict[int, Appointment] = {}
        self._category_ids = count(1)
        self._appointment_ids = count(1)

        if seed_categories:
            for name, color in DEFAULT_CATEGORIES:
                self.create_category(name, color)

    def list_categories(self) -> list[Category]:
        with self._lock:
            return sorted(self._categories.values(), key=lambda category: category.id)

    def create_category(self, name: str, color: str) -> Category:
        with self._lock:
            category = Category(id=next(self._category_ids), name=name, color=color)
            self._categories[category.id] = category
            return category

    def delete_category(self, category_id: int) -> None:
        with self._lock:
            self._categories.pop(category_id, None)

    def list_appointments(self) -> list[Appointment]:
        with self._lock:
            return sorted(self._appointments.values(), key=lambda appointment: appointment.start_time)

    def list_appointments_in_range(self, start: datetime, end: datetime) -> list[Appointment]:
        return [
            appointment
            for appointment in self.list_appointments()
            if start <= appointment.start_time <= end
        ]

    def get_appointment(self, appointment_id: int) -> Appointment | None:
        with self._lock:
            return self._appointments.get(appointment_id)

    def create_appointment(self, values: dict) -> Appointment:
        with self._lock:
            appointment = Appointment(
                id=next(self._appointment_ids),
                notification_sent=False,
                **{field: None for field in APPOINTMENT_FIELDS},
            )
            for key, value in _writable_fields(values).items():
                setattr(appointment, key, value)
            self._appointments[appointment.id] = appointment
            return appointment

    def update_appointment(self, appointment_id: int, values: dict) -> Appointment:
        with self._lock:
            appointment = self._appointments.get(appointment_id)
            if appointment is None:
                raise AppointmentNotFoundError(appointment_id)
            for key, value in _writable_fields(values).items():
                setattr(appointment, key, value)
            return appointment

    def delete_appointment(self, appointment_id: int) -> None:
        with self._lock:
            self._appointments.pop(appointment_id, None)

    def list_pending_notification(self) -> list[Appointment]:
        return [appointment for appointment in self.list_appointments() if not appointment.notification_sent]

    def set_notified(self, appointment_id: int) -> None:
        with self._lock:
            appointment = self._appointments.get(appointment_id)
            if appointment is not None:
                appointment.notification_sent = True


class DatabaseStore(AppointmentStore):
    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self._session_factory = session_factory

    def _session(self) -> Session:
        return self._session_factory()

    def list_categories(self) -> list[Category]:
        db = self._session()
        try:
            return db.query(Category).order_by(Category.id.asc()).all()
        finally:
            db.close()

    def create_category(self, name: str, color: str) -> Category:
        db = self._session()
        try:
            category = Category(name=name, color=color)
            db.add(category)
            db.commit()
            db.refresh(category)
            return category
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def delete_category(self, category_id: int) -> None:
        db = self._session()
        try:
            db.query(Category).filter(Category.id == category_id).delete(synchronize_session=False)
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def list_appointments(self) -> list[Appointment]:
        db = self._session()
        try:
            return db.query(Appointment).order_by(Appointment.start_time.asc()).all()
        finally:
            db.close()

    def list_appointments_in_range(self, start: datetime, end: datetime) -> list[Appointment]:
        db = self._session()
        try:
            return db.query(Appointment).filter(
                Appointment.start_time >= start,
                Appointment.start_time <= end,
            ).order_by(Appointment.start_time.asc()).all()
        finally:
            db.close()

    def get_appointment(self, appointment_id: int) -> Appointment | None:
        db = self._session()
        try:
            return db.query(Appointment).filter(Appointment.id == appointment_id).first()
        finally:
            db.close()

    def create_appointment(self, values: dict) -> Appointment:
        db = self._session()
        try:
            appointment = Appointment(**_writable_fields(values), notification_sent=False)
            db.add(appointment)
            db.commit()
            db.refresh(appointment)
            return appointment
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def update_appointment(self, appointment_id: int, values: dict) -> Appointment:
        db = self._session()
        try:
            appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
            if appointment is None:
                raise AppointmentNotFoundError(appointment_id)
            for key, value in _writable_fields(values).items():
                setattr(appointment, key, value)
            db.commit()
            db.refresh(appointment)
            return appointment
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def delete_appointment(self, appointment_id: int) -> None:
        db = self._session()
        try:
            db.query(Appointment).filter(Appointment.id == appointment_id).delete(synchronize_session=False)
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def list_pending_notification(self) -> list[Appointment]:
        db = self._session()
        try:
            return db.query(Appointment).filter(
                or_(Appointment.notification_sent.is_(False), Appointment.notification_sent.is_(None)),
            ).order_by(Appointment.start_time.asc()).all()
        finally:
            db.close()

    def set_notified(self, appointment_id: int) -> None:
        db = self._session()
        try:
            db.query(Appointment).filter(Appointment.id == appointment_id).update(
                {Appointment.notification_sent: True},
                synchronize_session=False,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


def build_store() -> AppointmentStore:
    if config.STORAGE_BACKEND == 'memory':
        logger.info('Using in-memory appointment store')
        return MemoryStore()

    Base.metadata.create_all(bind=engine)
    ensure_appointment_schema()
    seed_default_categories()
    logger.info('Using database appointment store')
    return DatabaseStore()
