import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from agenda.core.exceptions import BusinessNotFound, InvalidDuration
from agenda.core.security import get_current_owner
from agenda.database import get_session
from agenda.domain.availability import BusinessHours
from agenda.domain.timeutils import normalize_time
from agenda.models.business_settings import (
    BusinessSettings,
    BusinessSettingsUpdate,
    encode_open_days,
    slugify,
)
from agenda.models.user import User
from agenda.repositories import store_guard

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/business-settings", tags=["business-settings"])


def _get_settings(session: Session, owner: User) -> BusinessSettings:
    biz = session.exec(
        select(BusinessSettings).where(BusinessSettings.owner_id == owner.id)
    ).first()
    if not biz:
        raise BusinessNotFound()
    return biz


def _serialize(biz: BusinessSettings) -> dict:
    data = biz.model_dump()
    data["open_days"] = biz.open_day_codes()
    return data


@router.get("/")
def get_business_settings(
    session: Session = Depends(get_session),
    current_owner: User = Depends(get_current_owner),
):
    return _serialize(_get_settings(session, current_owner))


@router.put("/")
def update_business_settings(
    payload: BusinessSettingsUpdate,
    session: Session = Depends(get_session),
    current_owner: User = Depends(get_current_owner),
):
    biz = _get_settings(session, current_owner)
    updates = payload.model_dump(exclude_unset=True)

    # validações básicas
    open_days = updates.pop("open_days", None)
    if open_days is not None:
        updates["open_days"] = encode_open_days(open_days)
    for key in ("open_time", "close_time"):
        if updates.get(key) is not None:
            updates[key] = normalize_time(updates[key])

    BusinessHours.build(
        open_days if open_days is not None else biz.open_day_codes(),
        updates.get("open_time") or biz.open_time,
        updates.get("close_time") or biz.close_time,
    ).validate()

    granularity = updates.get("slot_granularity_minutes")
    if granularity is not None and granularity <= 0:
        raise InvalidDuration("Intervalo da grade deve ser positivo")

    if updates.get("slug"):
        updates["slug"] = slugify(updates["slug"])
        taken = session.exec(
            select(BusinessSettings).where(
                BusinessSettings.slug == updates["slug"],
                BusinessSettings.owner_id != current_owner.id,
            )
        ).first()
        if taken:
            raise HTTPException(status_code=400, detail="Endereço público já está em uso")

    with store_guard(session):
        for key, value in updates.items():
            if value is not None:
                setattr(biz, key, value)
        session.add(biz)
        session.commit()
        session.refresh(biz)

    logger.info("Configurações do tenant %s atualizadas", current_owner.id)
    return _serialize(biz)
