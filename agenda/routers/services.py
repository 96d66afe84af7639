from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from agenda.core.exceptions import InvalidDuration, ServiceNotFound, ValidationFailure
from agenda.database import get_session
from agenda.models.service import Service, ServiceCreate, ServiceUpdate
from agenda.models.user import User
from agenda.core.security import get_current_owner
from agenda.repositories import store_guard


router = APIRouter(
    prefix="/services",
    tags=["services"]
)

SERVICE_KINDS = ("service", "combo", "offer")


def _get_owned(session: Session, owner: User, service_id: int) -> Service:
    service = session.get(Service, service_id)
    if not service or service.owner_id != owner.id:
        raise ServiceNotFound()
    return service


def resolve_package(session: Session, owner: User, payload: ServiceCreate) -> tuple:
    """
    Combos e ofertas: duração e preço agregados dos serviços incluídos,
    a menos que venham explícitos. Para a agenda tudo vira "uma duração".
    """
    duration, price = payload.duration_minutes, payload.price
    original_price = payload.original_price

    if payload.kind != "service" and payload.included_service_ids:
        included = [_get_owned(session, owner, sid) for sid in payload.included_service_ids]
        total_duration = sum(s.duration_minutes for s in included)
        total_price = sum(s.price for s in included)
        if duration is None:
            duration = total_duration
        if price is None:
            price = total_price
        if original_price is None:
            original_price = total_price

    if duration is None or duration <= 0:
        raise InvalidDuration()
    if price is None or price < 0:
        raise ValidationFailure("Preço inválido")
    return duration, price, original_price


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_service(
    payload: ServiceCreate,
    session: Session = Depends(get_session),
    current_owner: User = Depends(get_current_owner),
):
    if payload.kind not in SERVICE_KINDS:
        raise HTTPException(status_code=400, detail="kind deve ser service, combo ou offer")

    duration, price, original_price = resolve_package(session, current_owner, payload)

    service = Service(
        name=payload.name,
        duration_minutes=duration,
        price=price,
        original_price=original_price,
        category=payload.category,
        kind=payload.kind,
        included_service_ids=list(payload.included_service_ids),
        description=payload.description,
        owner_id=current_owner.id,
    )

    with store_guard(session):
        session.add(service)
        session.commit()
        session.refresh(service)

    return service


@router.get("/")
def list_my_services(
    include_inactive: bool = False,
    session: Session = Depends(get_session),
    current_owner: User = Depends(get_current_owner),
):
    query = select(Service).where(Service.owner_id == current_owner.id)
    if not include_inactive:
        query = query.where(Service.active == True)  # noqa: E712
    return session.exec(query.order_by(Service.category, Service.name)).all()


@router.patch("/{service_id}")
def update_service(
    service_id: int,
    payload: ServiceUpdate,
    session: Session = Depends(get_session),
    current_owner: User = Depends(get_current_owner),
):
    service = _get_owned(session, current_owner, service_id)
    updates = payload.model_dump(exclude_unset=True)

    if "duration_minutes" in updates and (updates["duration_minutes"] or 0) <= 0:
        raise InvalidDuration()
    if "price" in updates and (updates["price"] is None or updates["price"] < 0):
        raise ValidationFailure("Preço inválido")

    with store_guard(session):
        for key, value in updates.items():
            setattr(service, key, value)
        session.add(service)
        session.commit()
        session.refresh(service)
    return service


@router.delete("/{service_id}")
def deactivate_service(
    service_id: int,
    session: Session = Depends(get_session),
    current_owner: User = Depends(get_current_owner),
):
    """Serviços não são apagados: o histórico de agendamentos aponta para eles."""
    service = _get_owned(session, current_owner, service_id)
    with store_guard(session):
        service.active = False
        session.add(service)
        session.commit()
    return {"message": "Serviço desativado"}
