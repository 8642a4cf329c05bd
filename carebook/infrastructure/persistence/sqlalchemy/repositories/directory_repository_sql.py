from typing import Optional
from sqlmodel import Session, select

from .....db.models import Doctor, Patient
from .....application.ports.directory_repo import DirectoryRepository, DoctorDto, PatientDto


class SqlDirectoryRepository(DirectoryRepository):
    """Profile lookups that share the caller's transaction.

    Each query runs in its own SAVEPOINT so a failed lookup rolls back only
    itself; callers that fall back to generic names can keep writing.
    """

    def __init__(self, session: Session):
        self.session = session

    def _first(self, stmt):
        with self.session.begin_nested():
            return self.session.exec(stmt).first()

    def get_doctor(self, doctor_id: int) -> Optional[DoctorDto]:
        d = self._first(select(Doctor).where(Doctor.id == doctor_id))
        if not d:
            return None
        return DoctorDto(id=d.id, name=d.name, specialization=d.specialization, working_hours=d.working_hours)

    def get_patient(self, patient_id: int) -> Optional[PatientDto]:
        p = self._first(select(Patient).where(Patient.id == patient_id))
        return PatientDto(id=p.id, name=p.name) if p else None
