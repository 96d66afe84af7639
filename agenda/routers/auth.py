import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session, select

from agenda.database import get_session
from agenda.models.business_settings import BusinessSettings
from agenda.models.user import User
from agenda.core.security import verify_password, create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: Session = Depends(get_session),
):
    user = session.exec(
        select(User).where(User.email == form_data.username)
    ).first()

    if not user or not verify_password(form_data.password, user.password_hash):
        logger.warning("Login recusado para %s", form_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Email ou senha inválidos",
        )

    business = session.exec(
        select(BusinessSettings).where(BusinessSettings.owner_id == user.id)
    ).first()

    return {
        "access_token": create_access_token(data={"sub": user.email}),
        "token_type": "bearer",
        "user": {"id": user.id, "name": user.name, "role": user.role},
        "business_slug": business.slug if business else None,
    }
