from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from agenda.core.security import get_current_owner
from agenda.database import get_session
from agenda.models.appointment import (
    AppointmentCreate,
    AppointmentUpdate,
    AvailableSlots,
    FinishRequest,
    MoveRequest,
    RescheduleRequest,
)
from agenda.models.user import User
from agenda.services.scheduling import SchedulingService


router = APIRouter(prefix="/appointments", tags=["appointments"])


def get_scheduling_service(session: Session = Depends(get_session)) -> SchedulingService:
    return SchedulingService(session)


# =========================
# HORÁRIOS DISPONÍVEIS (dia + serviço ou duração)
# GET /appointments/available?service_id=1&day=2026-02-14
# =========================
@router.get("/available", response_model=AvailableSlots)
def get_available_slots(
    day: date,
    service_id: Optional[int] = None,
    duration_minutes: Optional[int] = None,
    service: SchedulingService = Depends(get_scheduling_service),
    current_owner: User = Depends(get_current_owner),
):
    return service.available_slots(
        current_owner.id, day, service_id=service_id, duration_minutes=duration_minutes
    )


# =========================
# LISTAR AGENDAMENTOS
# - day: um dia; start/end: intervalo (inclusivo)
# =========================
@router.get("/")
def list_appointments(
    day: Optional[date] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    status_in: Optional[List[str]] = Query(default=None, alias="status"),
    service: SchedulingService = Depends(get_scheduling_service),
    current_owner: User = Depends(get_current_owner),
):
    if day is not None:
        start = end = day
    return service.list_appointments(current_owner.id, start, end, status_in)


# =========================
# CRIAR AGENDAMENTO (EQUIPE)
# =========================
@router.post("/", status_code=status.HTTP_201_CREATED)
def create_appointment(
    payload: AppointmentCreate,
    service: SchedulingService = Depends(get_scheduling_service),
    current_owner: User = Depends(get_current_owner),
):
    return service.create(current_owner.id, payload, origin="staff")


@router.get("/{appointment_id}")
def get_appointment(
    appointment_id: int,
    service: SchedulingService = Depends(get_scheduling_service),
    current_owner: User = Depends(get_current_owner),
):
    return service.get_appointment(current_owner.id, appointment_id)


@router.patch("/{appointment_id}")
def update_appointment(
    appointment_id: int,
    payload: AppointmentUpdate,
    service: SchedulingService = Depends(get_scheduling_service),
    current_owner: User = Depends(get_current_owner),
):
    return service.update_details(
        current_owner.id, appointment_id, payload.model_dump(exclude_unset=True)
    )


# =========================
# TRANSIÇÕES DE STATUS
# =========================
@router.patch("/{appointment_id}/confirm")
def confirm_appointment(
    appointment_id: int,
    service: SchedulingService = Depends(get_scheduling_service),
    current_owner: User = Depends(get_current_owner),
):
    return service.confirm(current_owner.id, appointment_id)


@router.patch("/{appointment_id}/start")
def start_appointment(
    appointment_id: int,
    service: SchedulingService = Depends(get_scheduling_service),
    current_owner: User = Depends(get_current_owner),
):
    return service.start(current_owner.id, appointment_id)


@router.patch("/{appointment_id}/finish")
def finish_appointment(
    appointment_id: int,
    payload: FinishRequest,
    service: SchedulingService = Depends(get_scheduling_service),
    current_owner: User = Depends(get_current_owner),
):
    return service.finish(
        current_owner.id, appointment_id, payload.payment_method, payload.satisfaction_score
    )


@router.patch("/{appointment_id}/cancel")
def cancel_appointment(
    appointment_id: int,
    service: SchedulingService = Depends(get_scheduling_service),
    current_owner: User = Depends(get_current_owner),
):
    return service.cancel(current_owner.id, appointment_id)


@router.patch("/{appointment_id}/mark-reschedule")
def mark_reschedule(
    appointment_id: int,
    service: SchedulingService = Depends(get_scheduling_service),
    current_owner: User = Depends(get_current_owner),
):
    return service.mark_reschedule(current_owner.id, appointment_id)


@router.patch("/{appointment_id}/reschedule")
def reschedule_appointment(
    appointment_id: int,
    payload: RescheduleRequest,
    service: SchedulingService = Depends(get_scheduling_service),
    current_owner: User = Depends(get_current_owner),
):
    return service.reschedule(current_owner.id, appointment_id, payload.date, payload.start_time)


@router.patch("/{appointment_id}/move")
def move_appointment(
    appointment_id: int,
    payload: MoveRequest,
    service: SchedulingService = Depends(get_scheduling_service),
    current_owner: User = Depends(get_current_owner),
):
    """Arrastar na agenda: mantém o status (exceto 'reschedule' -> confirmed)."""
    return service.move(current_owner.id, appointment_id, payload.start_time, payload.date)
