"""
Página pública de agendamento (sem login), identificada pelo slug.
"""

from datetime import date

from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select

from agenda.core.exceptions import BusinessNotFound
from agenda.database import get_session
from agenda.models.appointment import AppointmentCreate, AvailableSlots, PublicBookingCreate
from agenda.models.business_settings import BusinessSettings
from agenda.models.service import Service
from agenda.repositories import AppointmentRepository
from agenda.services.clients import ClientService
from agenda.services.scheduling import SchedulingService

router = APIRouter(prefix="/public", tags=["public"])


def _get_business(session: Session, slug: str) -> BusinessSettings:
    biz = AppointmentRepository(session).get_settings_by_slug(slug)
    if not biz:
        raise BusinessNotFound()
    return biz


@router.get("/{slug}")
def business_page(slug: str, session: Session = Depends(get_session)):
    biz = _get_business(session, slug)
    services = session.exec(
        select(Service)
        .where(Service.owner_id == biz.owner_id, Service.active == True)  # noqa: E712
        .order_by(Service.category, Service.name)
    ).all()

    return {
        "business_name": biz.business_name,
        "slug": biz.slug,
        "description": biz.description,
        "phone": biz.phone,
        "address": biz.address,
        "open_days": biz.open_day_codes(),
        "open_time": biz.open_time,
        "close_time": biz.close_time,
        "services": [
            {
                "id": s.id,
                "name": s.name,
                "category": s.category,
                "kind": s.kind,
                "duration_minutes": s.duration_minutes,
                "price": s.price,
                "original_price": s.original_price,
                "description": s.description,
            }
            for s in services
        ],
    }


@router.get("/{slug}/available", response_model=AvailableSlots)
def public_available_slots(
    slug: str,
    service_id: int,
    day: date,
    session: Session = Depends(get_session),
):
    biz = _get_business(session, slug)
    return SchedulingService(session).available_slots(
        biz.owner_id, day, service_id=service_id, active_only=True
    )


@router.post("/{slug}/bookings", status_code=status.HTTP_201_CREATED)
def public_booking(
    slug: str,
    payload: PublicBookingCreate,
    session: Session = Depends(get_session),
):
    """Agendamento pelo próprio cliente: entra direto como confirmed."""
    biz = _get_business(session, slug)
    appt = SchedulingService(session).create(
        biz.owner_id,
        AppointmentCreate(
            client_name=payload.name,
            client_phone=payload.phone,
            service_id=payload.service_id,
            date=payload.date,
            start_time=payload.start_time,
            notes=f"Origem: {payload.origin}" if payload.origin else None,
        ),
        origin="public",
    )
    return {
        "id": appt.id,
        "service": appt.service_name_snapshot,
        "date": appt.date.isoformat(),
        "start_time": appt.start_time,
        "end_time": appt.end_time,
        "status": appt.status,
        "value": appt.value,
    }


@router.get("/{slug}/history")
def public_client_history(slug: str, phone: str, session: Session = Depends(get_session)):
    """Área do cliente: atendimentos pelo telefone informado."""
    biz = _get_business(session, slug)
    history = ClientService(session).history_by_phone(biz.owner_id, phone)
    return [
        {
            "id": a.id,
            "service": a.service_name_snapshot,
            "date": a.date.isoformat(),
            "start_time": a.start_time,
            "end_time": a.end_time,
            "status": a.status,
            "value": a.value,
        }
        for a in history
    ]
