import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from agenda.database import get_session
from agenda.models.business_settings import BusinessSettings, slugify
from agenda.models.user import User, UserCreate
from agenda.core.security import get_password_hash

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def _unique_slug(session: Session, base: str) -> str:
    slug, n = base, 1
    while session.exec(select(BusinessSettings).where(BusinessSettings.slug == slug)).first():
        n += 1
        slug = f"{base}-{n}"
    return slug


@router.post("/")
def create_user(user: UserCreate, session: Session = Depends(get_session)):

    if user.role != "owner":
        raise HTTPException(status_code=400, detail="Cadastro disponível apenas para donos de estabelecimento")

    existing_user = session.exec(
        select(User).where(User.email == user.email)
    ).first()

    if existing_user:
        raise HTTPException(status_code=400, detail="Email já cadastrado")

    hashed_password = get_password_hash(user.password)

    db_user = User(
        name=user.name,
        email=user.email,
        password_hash=hashed_password,
        role=user.role
    )
    session.add(db_user)
    session.flush()

    # todo dono nasce com um estabelecimento (seg-sáb 09-18)
    business_name = user.business_name or user.name
    business = BusinessSettings(
        owner_id=db_user.id,
        business_name=business_name,
        slug=_unique_slug(session, slugify(business_name)),
        email=user.email,
    )
    session.add(business)

    session.commit()
    session.refresh(db_user)
    logger.info("Usuário %s cadastrado (%s)", db_user.id, db_user.role)

    return {
        "id": db_user.id,
        "name": db_user.name,
        "email": db_user.email,
        "business_slug": business.slug,
    }
