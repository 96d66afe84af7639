from typing import Literal, Optional
import datetime
from sqlmodel import SQLModel, Field

CostCategory = Literal["Fixo", "Variável", "Marketing", "Pessoal", "Impostos"]
CostStatus = Literal["paid", "pending"]
CostRecurrence = Literal["none", "monthly", "yearly"]


class Cost(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    owner_id: int = Field(foreign_key="user.id", index=True)

    title: str
    category: str = Field(default="Fixo", index=True)
    value: float
    date: datetime.date = Field(index=True)

    status: str = "pending"  # paid | pending
    recurrence: str = "none"  # none | monthly | yearly
    notes: Optional[str] = None


class CostCreate(SQLModel):
    title: str
    category: CostCategory = "Fixo"
    value: float = Field(ge=0)
    date: datetime.date
    status: CostStatus = "pending"
    recurrence: CostRecurrence = "none"
    notes: Optional[str] = None


class CostUpdate(SQLModel):
    title: Optional[str] = None
    category: Optional[CostCategory] = None
    value: Optional[float] = Field(default=None, ge=0)
    date: Optional[datetime.date] = None
    status: Optional[CostStatus] = None
    recurrence: Optional[CostRecurrence] = None
    notes: Optional[str] = None
