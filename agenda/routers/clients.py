from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from agenda.database import get_session
from agenda.models.client import ClientCreate, ClientUpdate
from agenda.models.user import User
from agenda.core.security import get_current_owner
from agenda.services.clients import ClientService

router = APIRouter(prefix="/clients", tags=["clients"])


def get_client_service(session: Session = Depends(get_session)) -> ClientService:
    return ClientService(session)


@router.get("/")
def list_clients(
    service: ClientService = Depends(get_client_service),
    current_owner: User = Depends(get_current_owner),
):
    return service.list_clients(current_owner.id)


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_client(
    payload: ClientCreate,
    service: ClientService = Depends(get_client_service),
    current_owner: User = Depends(get_current_owner),
):
    return service.create_client(current_owner.id, payload)


@router.get("/{client_id}")
def get_client(
    client_id: int,
    service: ClientService = Depends(get_client_service),
    current_owner: User = Depends(get_current_owner),
):
    return service.get_client(current_owner.id, client_id)


@router.patch("/{client_id}")
def update_client(
    client_id: int,
    payload: ClientUpdate,
    service: ClientService = Depends(get_client_service),
    current_owner: User = Depends(get_current_owner),
):
    return service.update_client(current_owner.id, client_id, payload)


@router.get("/{client_id}/history")
def client_history(
    client_id: int,
    service: ClientService = Depends(get_client_service),
    current_owner: User = Depends(get_current_owner),
):
    """Atendimentos do cliente, do mais recente para o mais antigo."""
    return service.history(current_owner.id, client_id)
