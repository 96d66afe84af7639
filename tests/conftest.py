"""
Fixtures compartilhadas: banco SQLite em memória, um dono com
estabelecimento aberto seg-sáb 09:00-18:00 e um catálogo pequeno.
"""

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from agenda.database import get_session
from agenda.main import app
from agenda.models.business_settings import BusinessSettings
from agenda.models.service import Service
from agenda.models.user import User

MONDAY = date(2026, 2, 16)
SATURDAY = date(2026, 2, 21)
SUNDAY = date(2026, 2, 15)


def next_monday() -> date:
    """Próxima segunda-feira (sempre no futuro), para o fluxo público."""
    today = date.today()
    return today + timedelta(days=7 - today.weekday())


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


def make_owner(session: Session, email: str = "dona@salao.dev", slug: str = "salao") -> User:
    owner = User(name="Dona", email=email, password_hash="x", role="owner")
    session.add(owner)
    session.flush()
    session.add(
        BusinessSettings(
            owner_id=owner.id,
            business_name="Salão",
            slug=slug,
            open_days="Seg,Ter,Qua,Qui,Sex,Sáb",
            open_time="09:00",
            close_time="18:00",
        )
    )
    session.commit()
    session.refresh(owner)
    return owner


def make_service(session: Session, owner: User, name: str, duration: int, price: float = 50.0) -> Service:
    service = Service(name=name, duration_minutes=duration, price=price, owner_id=owner.id)
    session.add(service)
    session.commit()
    session.refresh(service)
    return service


@pytest.fixture
def owner(session):
    return make_owner(session)


@pytest.fixture
def hour_service(session, owner):
    return make_service(session, owner, "Escova", 60, 80.0)


@pytest.fixture
def half_hour_service(session, owner):
    return make_service(session, owner, "Corte", 30, 60.0)


@pytest.fixture
def client(engine):
    def _get_session_override():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session_override
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
    client.post(
        "/users/",
        json={"name": "Ana", "email": "ana@salao.dev", "password": "segredo", "business_name": "Studio Ana"},
    )
    response = client.post("/auth/login", data={"username": "ana@salao.dev", "password": "segredo"})
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}
