from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass
class DoctorDto:
    id: int
    name: str
    specialization: str
    working_hours: Optional[str]


@dataclass
class PatientDto:
    id: int
    name: str


class DirectoryRepository(Protocol):
    """Read-only view of the profile service's doctors and patients."""

    def get_doctor(self, doctor_id: int) -> Optional[DoctorDto]:
        ...

    def get_patient(self, patient_id: int) -> Optional[PatientDto]:
        ...
