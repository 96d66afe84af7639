from typing import List, Optional
from sqlmodel import SQLModel, Field, Column, JSON


class Service(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    name: str
    duration_minutes: int
    price: float
    original_price: Optional[float] = None
    category: str = "Geral"

    # service | combo | offer
    kind: str = Field(default="service", index=True)
    # combos/ofertas: serviços que compõem o pacote
    included_service_ids: List[int] = Field(default_factory=list, sa_column=Column(JSON))

    description: str = ""
    active: bool = True

    owner_id: int = Field(foreign_key="user.id", index=True)


class ServiceCreate(SQLModel):
    name: str
    duration_minutes: Optional[int] = None
    price: Optional[float] = None
    original_price: Optional[float] = None
    category: str = "Geral"
    kind: str = "service"
    included_service_ids: List[int] = []
    description: str = ""


class ServiceUpdate(SQLModel):
    name: Optional[str] = None
    duration_minutes: Optional[int] = None
    price: Optional[float] = None
    original_price: Optional[float] = None
    category: Optional[str] = None
    description: Optional[str] = None
    active: Optional[bool] = None
