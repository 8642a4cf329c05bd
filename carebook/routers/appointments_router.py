from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
import logging

from ..application.ports.identity import Actor, Role
from ..application.services.appointments_service import AppointmentsService
from ..auth import get_current_actor, require_roles
from ..dependencies import get_appointments_service
from ..exceptions import InvalidInput
from ..schemas.common.common import ErrorResponse
from ..schemas.appointments.appointment import (
    AppointmentCreate,
    AppointmentReschedule,
    AppointmentResponse,
    AppointmentUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/appointments",
    tags=["Appointments"],
    responses={code: {"model": ErrorResponse} for code in (400, 403, 404, 409)},
)


@router.post("", response_model=AppointmentResponse, status_code=201)
def book_appointment(
    appointment_data: AppointmentCreate,
    actor: Actor = Depends(require_roles(Role.PATIENT)),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    patient_id = appointment_data.patient_id
    if patient_id is None:
        if actor.role != Role.PATIENT:
            raise InvalidInput("patientId is required")
        patient_id = actor.user_id
    try:
        appt = appt_service.create(
            patient_id,
            appointment_data.doctor_id,
            appointment_data.appointment_date,
            appointment_data.appointment_time,
            appointment_data.appointment_type,
            appointment_data.notes,
            actor=actor,
        )
        return AppointmentResponse.from_dto(appt)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error booking appointment: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to book appointment")


@router.get("", response_model=List[AppointmentResponse])
def list_appointments(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    actor: Actor = Depends(require_roles()),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    return [AppointmentResponse.from_dto(a) for a in appt_service.list_all(limit=limit, offset=offset, actor=actor)]


@router.get("/available/{doctor_id}/{date}", response_model=List[str])
def get_available_slots(
    doctor_id: int,
    date: str,
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    return appt_service.available_slots(doctor_id, date)


@router.get("/patient/{patient_id}", response_model=List[AppointmentResponse])
def get_patient_appointments(
    patient_id: int,
    actor: Actor = Depends(get_current_actor),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    return [AppointmentResponse.from_dto(a) for a in appt_service.list_for_patient(patient_id, actor=actor)]


@router.get("/doctor/{doctor_id}", response_model=List[AppointmentResponse])
def get_doctor_appointments(
    doctor_id: int,
    start: Optional[str] = Query(None, description="First day, YYYY-MM-DD"),
    end: Optional[str] = Query(None, description="Last day, YYYY-MM-DD"),
    actor: Actor = Depends(get_current_actor),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appts = appt_service.list_for_doctor(doctor_id, start=start, end=end, actor=actor)
    return [AppointmentResponse.from_dto(a) for a in appts]


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: int,
    actor: Actor = Depends(get_current_actor),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    return AppointmentResponse.from_dto(appt_service.get_by_id(appointment_id, actor=actor))


@router.put("/{appointment_id}", response_model=AppointmentResponse)
def update_appointment(
    appointment_id: int,
    update: AppointmentUpdate,
    actor: Actor = Depends(require_roles(Role.DOCTOR)),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.update(appointment_id, status=update.status, notes=update.notes, actor=actor)
    return AppointmentResponse.from_dto(appt)


@router.post("/{appointment_id}/reschedule", response_model=AppointmentResponse)
def reschedule_appointment(
    appointment_id: int,
    body: AppointmentReschedule,
    actor: Actor = Depends(get_current_actor),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.reschedule(appointment_id, body.appointment_date, body.appointment_time, actor=actor)
    return AppointmentResponse.from_dto(appt)


@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: int,
    actor: Actor = Depends(get_current_actor),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.cancel(appointment_id, actor=actor)
    logger.info(f"Appointment {appointment_id} cancelled via API by {actor.role.value} {actor.user_id}")
    return AppointmentResponse.from_dto(appt)
