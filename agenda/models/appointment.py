import datetime
from typing import Optional
from sqlmodel import SQLModel, Field

from agenda.domain.status import AppointmentStatus
from agenda.domain.timeutils import utcnow


class Appointment(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    owner_id: int = Field(foreign_key="user.id", index=True)
    client_id: int = Field(foreign_key="client.id", index=True)
    # nulo para serviço avulso
    service_id: Optional[int] = Field(default=None, foreign_key="service.id", index=True)

    date: datetime.date = Field(index=True)
    start_time: str  # HH:MM
    end_time: str  # HH:MM

    # SNAPSHOT DO SERVIÇO
    service_name_snapshot: str
    service_duration_snapshot: int

    # STATUS DO AGENDAMENTO
    status: str = Field(default=AppointmentStatus.CONFIRMED.value, index=True)
    # pending | confirmed | in_progress | completed | canceled | reschedule

    value: float = 0.0
    cost: Optional[float] = None

    # preenchidos só ao finalizar
    payment_method: Optional[str] = None
    satisfaction_score: Optional[int] = None

    origin: Optional[str] = None  # public | staff
    notes: Optional[str] = None

    created_at: datetime.datetime = Field(default_factory=utcnow, index=True)
    updated_at: Optional[datetime.datetime] = None
    canceled_at: Optional[datetime.datetime] = Field(default=None, index=True)


class AppointmentCreate(SQLModel):
    # cliente: id existente ou nome + telefone
    client_id: Optional[int] = None
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    client_email: Optional[str] = None

    # serviço: id do catálogo ou avulso (nome + duração)
    service_id: Optional[int] = None
    service_name: Optional[str] = None
    duration_minutes: Optional[int] = None

    date: datetime.date
    start_time: str

    status: Optional[AppointmentStatus] = None
    value: Optional[float] = Field(default=None, ge=0)
    cost: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


class PublicBookingCreate(SQLModel):
    name: str
    phone: str
    service_id: int
    date: datetime.date
    start_time: str
    origin: Optional[str] = None


class FinishRequest(SQLModel):
    payment_method: str
    satisfaction_score: Optional[int] = None


class RescheduleRequest(SQLModel):
    date: datetime.date
    start_time: str


class MoveRequest(SQLModel):
    start_time: str
    date: Optional[datetime.date] = None


class AppointmentUpdate(SQLModel):
    end_time: Optional[str] = None
    value: Optional[float] = Field(default=None, ge=0)
    cost: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


class AvailableSlots(SQLModel):
    day: datetime.date
    is_closed: bool
    duration_minutes: int
    slot_step_minutes: int
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    slots: list[str] = []
