from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field

from agenda.domain.timeutils import utcnow


class ClientBase(SQLModel):
    name: str
    phone: str = Field(default="", index=True)
    email: Optional[str] = None
    origin: Optional[str] = None  # Instagram, Google, Indicação...
    birth_date: Optional[str] = None
    notes: Optional[str] = None


class Client(ClientBase, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: int = Field(foreign_key="user.id", index=True)
    created_at: datetime = Field(default_factory=utcnow)


class ClientCreate(ClientBase):
    pass


class ClientUpdate(SQLModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    origin: Optional[str] = None
    birth_date: Optional[str] = None
    notes: Optional[str] = None
