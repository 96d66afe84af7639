import logging
from typing import List

from sqlmodel import Session, select

from agenda.core.exceptions import ClientNotFound, ValidationFailure
from agenda.models.appointment import Appointment
from agenda.models.client import Client, ClientCreate, ClientUpdate
from agenda.repositories import AppointmentRepository, store_guard

logger = logging.getLogger(__name__)


class ClientService:
    """Cadastro de clientes do tenant."""

    def __init__(self, session: Session):
        self.session = session
        self.repo = AppointmentRepository(session)

    def list_clients(self, business_id: int) -> List[Client]:
        return list(
            self.session.exec(
                select(Client).where(Client.owner_id == business_id).order_by(Client.name)
            ).all()
        )

    def get_client(self, business_id: int, client_id: int) -> Client:
        client = self.repo.get_client(business_id, client_id)
        if client is None:
            raise ClientNotFound()
        return client

    def create_client(self, business_id: int, data: ClientCreate) -> Client:
        """
        Cria o cliente, ou devolve o existente com mesmo telefone/nome.
        """
        if not data.name.strip():
            raise ValidationFailure("Nome do cliente é obrigatório")

        with store_guard(self.session):
            extra = data.model_dump(exclude={"name", "phone"})
            client = self.repo.find_or_create_client(business_id, data.phone, data.name, **extra)
            self.session.commit()
            self.session.refresh(client)
        return client

    def update_client(self, business_id: int, client_id: int, data: ClientUpdate) -> Client:
        client = self.get_client(business_id, client_id)

        updates = data.model_dump(exclude_unset=True)
        with store_guard(self.session):
            for key, value in updates.items():
                setattr(client, key, value)
            self.session.add(client)
            self.session.commit()
            self.session.refresh(client)
        return client

    def history(self, business_id: int, client_id: int) -> List[Appointment]:
        self.get_client(business_id, client_id)
        return self.repo.list_client_appointments(business_id, client_id)

    def history_by_phone(self, business_id: int, phone: str) -> List[Appointment]:
        """Área do cliente na página pública: histórico pelo telefone."""
        client = self.repo.find_client(business_id, phone, None)
        if client is None:
            return []
        return self.repo.list_client_appointments(business_id, client.id)
