from datetime import date
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .....db.models import Appointment
from .....application.ports.appointments_repo import AppointmentsRepository, AppointmentDto
from .....application.services.state_machine import ACTIVE_STATUSES, AppointmentStatus
from .....exceptions import NotFound, SlotConflict
from .....utils import utcnow

ACTIVE_STATUS_VALUES = sorted(s.value for s in ACTIVE_STATUSES)
SLOT_INDEX_NAME = "uq_appointments_active_slot"


class SqlAppointmentsRepository(AppointmentsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _appt_to_dto(self, a: Appointment) -> AppointmentDto:
        return AppointmentDto(
            id=a.id,
            patient_id=a.patient_id,
            doctor_id=a.doctor_id,
            appointment_date=a.appointment_date,
            appointment_time=a.appointment_time,
            appointment_type=a.appointment_type,
            status=a.status,
            notes=a.notes,
            created_at=a.created_at,
            updated_at=a.updated_at,
        )

    def _row(self, appointment_id: int, for_update: bool = False) -> Optional[Appointment]:
        stmt = select(Appointment).where(Appointment.id == appointment_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.exec(stmt).first()

    def _require(self, appointment_id: int) -> Appointment:
        a = self._row(appointment_id)
        if not a:
            raise NotFound("Appointment not found", appointment_id=appointment_id)
        return a

    def _flush_slot(self, a: Appointment) -> None:
        """Flush pending writes, reporting a lost booking race as SlotConflict."""
        try:
            self.session.flush()
        except IntegrityError as e:
            message = str(e.orig)
            if SLOT_INDEX_NAME in message or "UNIQUE constraint failed: appointments." in message:
                raise SlotConflict(a.doctor_id, a.appointment_date, a.appointment_time) from e
            raise

    def get(self, appointment_id: int, for_update: bool = False) -> Optional[AppointmentDto]:
        a = self._row(appointment_id, for_update=for_update)
        return self._appt_to_dto(a) if a else None

    def find_conflict(self, doctor_id: int, appointment_date: date, appointment_time: str, exclude_id: Optional[int] = None) -> Optional[int]:
        stmt = (
            select(Appointment.id)
            .where(Appointment.doctor_id == doctor_id)
            .where(Appointment.appointment_date == appointment_date)
            .where(Appointment.appointment_time == appointment_time)
            .where(Appointment.status.in_(ACTIVE_STATUS_VALUES))
        )
        if exclude_id is not None:
            stmt = stmt.where(Appointment.id != exclude_id)
        return self.session.exec(stmt.with_for_update()).first()

    def add(self, patient_id: int, doctor_id: int, appointment_date: date, appointment_time: str, appointment_type: str, notes: str) -> AppointmentDto:
        a = Appointment(
            patient_id=patient_id,
            doctor_id=doctor_id,
            appointment_date=appointment_date,
            appointment_time=appointment_time,
            appointment_type=appointment_type,
            status=AppointmentStatus.PENDING.value,
            notes=notes,
        )
        self.session.add(a)
        self._flush_slot(a)
        return self._appt_to_dto(a)

    def set_status(self, appointment_id: int, status: str) -> AppointmentDto:
        a = self._require(appointment_id)
        a.status = status
        a.updated_at = utcnow()
        self.session.add(a)
        self._flush_slot(a)
        return self._appt_to_dto(a)

    def set_schedule(self, appointment_id: int, appointment_date: date, appointment_time: str) -> AppointmentDto:
        a = self._require(appointment_id)
        a.appointment_date = appointment_date
        a.appointment_time = appointment_time
        a.updated_at = utcnow()
        self.session.add(a)
        self._flush_slot(a)
        return self._appt_to_dto(a)

    def set_notes(self, appointment_id: int, notes: str) -> AppointmentDto:
        a = self._require(appointment_id)
        a.notes = notes
        a.updated_at = utcnow()
        self.session.add(a)
        self.session.flush()
        return self._appt_to_dto(a)

    def booked_times(self, doctor_id: int, appointment_date: date) -> List[str]:
        rows = self.session.exec(
            select(Appointment.appointment_time)
            .where(Appointment.doctor_id == doctor_id)
            .where(Appointment.appointment_date == appointment_date)
            .where(Appointment.status.in_(ACTIVE_STATUS_VALUES))
        ).all()
        return list(rows)

    def list_for_patient(self, patient_id: int) -> List[AppointmentDto]:
        rows = self.session.exec(
            select(Appointment)
            .where(Appointment.patient_id == patient_id)
            .order_by(Appointment.appointment_date.desc(), Appointment.appointment_time.asc())
        ).all()
        return [self._appt_to_dto(r) for r in rows]

    def list_for_doctor(self, doctor_id: int, start: Optional[date] = None, end: Optional[date] = None) -> List[AppointmentDto]:
        stmt = select(Appointment).where(Appointment.doctor_id == doctor_id)
        if start is not None:
            stmt = stmt.where(Appointment.appointment_date >= start)
        if end is not None:
            stmt = stmt.where(Appointment.appointment_date <= end)
        rows = self.session.exec(
            stmt.order_by(Appointment.appointment_date.asc(), Appointment.appointment_time.asc())
        ).all()
        return [self._appt_to_dto(r) for r in rows]

    def list_all(self, limit: int = 100, offset: int = 0) -> List[AppointmentDto]:
        rows = self.session.exec(
            select(Appointment)
            .order_by(Appointment.appointment_date.desc(), Appointment.appointment_time.asc())
            .offset(offset)
            .limit(limit)
        ).all()
        return [self._appt_to_dto(r) for r in rows]
