# carebook/schemas/appointments/appointment.py
from dataclasses import asdict
from datetime import date, datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Request bodies accept camelCase or snake_case; the core only sees field names.


class AppointmentCreate(BaseModel):
    patient_id: Optional[int] = Field(default=None, validation_alias=AliasChoices("patientId", "patient_id"))
    doctor_id: int = Field(validation_alias=AliasChoices("doctorId", "doctor_id"))
    appointment_date: str = Field(validation_alias=AliasChoices("date", "appointmentDate", "appointment_date"))  # YYYY-MM-DD
    appointment_time: str = Field(validation_alias=AliasChoices("time", "appointmentTime", "appointment_time"))  # HH:MM
    appointment_type: str = Field(validation_alias=AliasChoices("type", "appointmentType", "appointment_type"))
    notes: Optional[str] = ""


class AppointmentUpdate(BaseModel):
    status: Optional[str] = None
    notes: Optional[str] = None


class AppointmentReschedule(BaseModel):
    appointment_date: str = Field(validation_alias=AliasChoices("date", "appointmentDate", "appointment_date"))
    appointment_time: str = Field(validation_alias=AliasChoices("time", "appointmentTime", "appointment_time"))


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int
    patient_id: int
    doctor_id: int
    appointment_date: date = Field(alias="date")
    appointment_time: str = Field(alias="time")
    appointment_type: str = Field(alias="type")
    status: str
    notes: str = ""
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_dto(cls, appt) -> "AppointmentResponse":
        return cls.model_validate(asdict(appt))
