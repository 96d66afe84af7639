from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select

from agenda.core.exceptions import NotFoundError
from agenda.core.security import get_current_owner
from agenda.database import get_session
from agenda.models.cost import Cost, CostCreate, CostUpdate
from agenda.models.user import User
from agenda.repositories import store_guard

router = APIRouter(prefix="/costs", tags=["costs"])


def _get_owned(session: Session, owner: User, cost_id: int) -> Cost:
    cost = session.get(Cost, cost_id)
    if not cost or cost.owner_id != owner.id:
        raise NotFoundError("Custo não encontrado")
    return cost


@router.get("/")
def list_costs(
    start: Optional[date] = None,
    end: Optional[date] = None,
    session: Session = Depends(get_session),
    current_owner: User = Depends(get_current_owner),
):
    query = select(Cost).where(Cost.owner_id == current_owner.id)
    if start:
        query = query.where(Cost.date >= start)
    if end:
        query = query.where(Cost.date <= end)
    return session.exec(query.order_by(Cost.date.desc())).all()


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_cost(
    payload: CostCreate,
    session: Session = Depends(get_session),
    current_owner: User = Depends(get_current_owner),
):
    cost = Cost(owner_id=current_owner.id, **payload.model_dump())
    with store_guard(session):
        session.add(cost)
        session.commit()
        session.refresh(cost)
    return cost


@router.patch("/{cost_id}")
def update_cost(
    cost_id: int,
    payload: CostUpdate,
    session: Session = Depends(get_session),
    current_owner: User = Depends(get_current_owner),
):
    cost = _get_owned(session, current_owner, cost_id)
    with store_guard(session):
        for key, value in payload.model_dump(exclude_unset=True).items():
            setattr(cost, key, value)
        session.add(cost)
        session.commit()
        session.refresh(cost)
    return cost


@router.delete("/{cost_id}")
def delete_cost(
    cost_id: int,
    session: Session = Depends(get_session),
    current_owner: User = Depends(get_current_owner),
):
    cost = _get_owned(session, current_owner, cost_id)
    with store_guard(session):
        session.delete(cost)
        session.commit()
    return {"message": "Custo removido"}
