from typing import Optional
from datetime import datetime
from sqlmodel import SQLModel, Field

from agenda.domain.timeutils import utcnow


class UserBase(SQLModel):
    name: str
    email: str = Field(index=True, unique=True)
    role: str = "owner"  # dono do estabelecimento (tenant)


class User(UserBase, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    password_hash: str
    created_at: datetime = Field(default_factory=utcnow)


class UserCreate(UserBase):
    password: str
    business_name: Optional[str] = None
