from dataclasses import dataclass
from typing import List, Optional, Protocol
from datetime import datetime, date


@dataclass
class AppointmentDto:
    id: int
    patient_id: int
    doctor_id: int
    appointment_date: date
    appointment_time: str
    appointment_type: str
    status: str
    notes: str
    created_at: datetime
    updated_at: datetime


class AppointmentsRepository(Protocol):
    """Appointment rows, always read and written inside the caller's transaction."""

    def get(self, appointment_id: int, for_update: bool = False) -> Optional[AppointmentDto]:
        ...

    def find_conflict(self, doctor_id: int, appointment_date: date, appointment_time: str, exclude_id: Optional[int] = None) -> Optional[int]:
        """Return the id of an active appointment holding the slot, if any."""
        ...

    def add(self, patient_id: int, doctor_id: int, appointment_date: date, appointment_time: str, appointment_type: str, notes: str) -> AppointmentDto:
        ...

    def set_status(self, appointment_id: int, status: str) -> AppointmentDto:
        ...

    def set_schedule(self, appointment_id: int, appointment_date: date, appointment_time: str) -> AppointmentDto:
        ...

    def set_notes(self, appointment_id: int, notes: str) -> AppointmentDto:
        ...

    def booked_times(self, doctor_id: int, appointment_date: date) -> List[str]:
        ...

    def list_for_patient(self, patient_id: int) -> List[AppointmentDto]:
        ...

    def list_for_doctor(self, doctor_id: int, start: Optional[date] = None, end: Optional[date] = None) -> List[AppointmentDto]:
        ...

    def list_all(self, limit: int = 100, offset: int = 0) -> List[AppointmentDto]:
        ...
