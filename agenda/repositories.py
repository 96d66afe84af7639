"""
Acesso ao banco da agenda.

Tudo é filtrado pelo tenant (owner_id do dono autenticado). As funções de
escrita não fazem commit: quem decide o commit é a camada de serviço, que
segura o lock do tenant durante validação + escrita.
"""

import logging
import re
import threading
from contextlib import contextmanager
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from agenda.core.exceptions import AgendaError, StoreUnavailable
from agenda.models.appointment import Appointment
from agenda.models.business_settings import BusinessSettings
from agenda.models.client import Client
from agenda.models.service import Service

logger = logging.getLogger(__name__)


# =========================
# LOCK POR TENANT
# =========================

_tenant_locks: Dict[int, threading.Lock] = {}
_tenant_locks_guard = threading.Lock()


def tenant_lock(business_id: int) -> threading.Lock:
    with _tenant_locks_guard:
        lock = _tenant_locks.get(business_id)
        if lock is None:
            lock = _tenant_locks[business_id] = threading.Lock()
        return lock


@contextmanager
def store_guard(session: Session):
    """
    Desfaz a transação em qualquer falha. Erros de banco viram
    StoreUnavailable; erros de domínio passam intactos.
    """
    try:
        yield
    except AgendaError:
        session.rollback()
        raise
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Falha no banco, transação desfeita: %s", exc)
        raise StoreUnavailable() from exc
    except Exception:
        session.rollback()
        raise


def normalize_phone(phone: Optional[str]) -> str:
    """Mantém só dígitos (e o '+' inicial) para comparar telefones."""
    if not phone:
        return ""
    phone = phone.strip()
    digits = re.sub(r"\D", "", phone)
    if not digits:
        return ""
    return ("+" + digits) if phone.startswith("+") else digits


class AppointmentRepository:
    def __init__(self, session: Session):
        self.session = session

    # -------------------------
    # serialização de escritas
    # -------------------------
    @contextmanager
    def lock_business(self, business_id: int):
        """
        Serializa escritas do tenant: lock do processo + SELECT ... FOR UPDATE
        na linha de configurações (no PostgreSQL bloqueia outros processos).
        Dentro do lock tudo é relido do banco.
        """
        lock = tenant_lock(business_id)
        with lock:
            self.session.expire_all()
            self.session.exec(
                select(BusinessSettings)
                .where(BusinessSettings.owner_id == business_id)
                .with_for_update()
            ).first()
            yield

    # -------------------------
    # agendamentos
    # -------------------------
    def list_appointments(
        self,
        business_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
        statuses: Optional[List[str]] = None,
    ) -> List[Appointment]:
        """Agendamentos do tenant no intervalo [start, end] (datas inclusivas)."""
        query = select(Appointment).where(Appointment.owner_id == business_id)
        if start is not None:
            query = query.where(Appointment.date >= start)
        if end is not None:
            query = query.where(Appointment.date <= end)
        if statuses:
            query = query.where(Appointment.status.in_(statuses))
        query = query.order_by(Appointment.date, Appointment.start_time)
        return list(self.session.exec(query).all())

    def list_day(self, business_id: int, day: date) -> List[Appointment]:
        return self.list_appointments(business_id, day, day)

    def get_appointment(self, business_id: int, appointment_id: int) -> Optional[Appointment]:
        appt = self.session.get(Appointment, appointment_id)
        if appt is None or appt.owner_id != business_id:
            return None
        return appt

    def upsert_appointment(self, appt: Appointment) -> Appointment:
        self.session.add(appt)
        self.session.flush()
        return appt

    def list_client_appointments(self, business_id: int, client_id: int) -> List[Appointment]:
        return list(
            self.session.exec(
                select(Appointment)
                .where(Appointment.owner_id == business_id, Appointment.client_id == client_id)
                .order_by(Appointment.date.desc(), Appointment.start_time.desc())
            ).all()
        )

    # -------------------------
    # clientes
    # -------------------------
    def get_client(self, business_id: int, client_id: int) -> Optional[Client]:
        client = self.session.get(Client, client_id)
        if client is None or client.owner_id != business_id:
            return None
        return client

    def find_client(self, business_id: int, phone: Optional[str], name: Optional[str]) -> Optional[Client]:
        """Telefone igual primeiro, depois nome (sem diferenciar maiúsculas)."""
        clients = self.session.exec(select(Client).where(Client.owner_id == business_id)).all()

        wanted_phone = normalize_phone(phone)
        if wanted_phone:
            for client in clients:
                if normalize_phone(client.phone) == wanted_phone:
                    return client

        wanted_name = (name or "").strip().casefold()
        if wanted_name:
            for client in clients:
                if (client.name or "").strip().casefold() == wanted_name:
                    return client

        return None

    def find_or_create_client(
        self,
        business_id: int,
        phone: Optional[str],
        name: Optional[str],
        **extra,
    ) -> Client:
        client = self.find_client(business_id, phone, name)
        if client is not None:
            # completa o telefone de quem só existia pelo nome
            if phone and not client.phone:
                client.phone = phone.strip()
                self.session.add(client)
            return client

        client = Client(
            owner_id=business_id,
            name=(name or "").strip() or (phone or "").strip(),
            phone=(phone or "").strip(),
            **{k: v for k, v in extra.items() if v is not None},
        )
        self.session.add(client)
        self.session.flush()
        logger.info("Cliente %s criado para o tenant %s", client.id, business_id)
        return client

    # -------------------------
    # catálogo e configurações
    # -------------------------
    def get_service(self, business_id: int, service_id: int) -> Optional[Service]:
        service = self.session.get(Service, service_id)
        if service is None or service.owner_id != business_id:
            return None
        return service

    def get_settings(self, business_id: int) -> Optional[BusinessSettings]:
        return self.session.exec(
            select(BusinessSettings).where(BusinessSettings.owner_id == business_id)
        ).first()

    def get_settings_by_slug(self, slug: str) -> Optional[BusinessSettings]:
        return self.session.exec(
            select(BusinessSettings).where(BusinessSettings.slug == slug)
        ).first()

    def get_business_hours(self, business_id: int):
        settings = self.get_settings(business_id)
        if settings is None:
            return None
        return settings.business_hours()
