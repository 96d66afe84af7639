import re
import unicodedata
from typing import List, Optional
from sqlmodel import SQLModel, Field

from agenda.domain.availability import BusinessHours
from agenda.domain.timeutils import format_open_days, parse_open_days

DEFAULT_OPEN_DAYS = "Seg,Ter,Qua,Qui,Sex,Sáb"
DEFAULT_OPEN_TIME = "09:00"
DEFAULT_CLOSE_TIME = "18:00"


class BusinessSettings(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    # o dono é o tenant: todo dado da agenda é filtrado por owner_id
    owner_id: int = Field(foreign_key="user.id", index=True, unique=True)

    business_name: str
    slug: str = Field(index=True, unique=True)
    description: str = ""
    phone: str = ""
    address: str = ""
    email: str = ""

    # códigos separados por vírgula: Seg,Ter,Qua,Qui,Sex,Sáb,Dom
    open_days: str = DEFAULT_OPEN_DAYS
    open_time: str = DEFAULT_OPEN_TIME
    close_time: str = DEFAULT_CLOSE_TIME

    slot_granularity_minutes: Optional[int] = None

    def open_day_codes(self) -> List[str]:
        return [d.strip() for d in self.open_days.split(",") if d.strip()]

    def business_hours(self) -> BusinessHours:
        return BusinessHours.build(self.open_day_codes(), self.open_time, self.close_time)


class BusinessSettingsUpdate(SQLModel):
    business_name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    open_days: Optional[List[str]] = None
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    slot_granularity_minutes: Optional[int] = None


def encode_open_days(codes) -> str:
    return ",".join(format_open_days(parse_open_days(codes)))


def slugify(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text or "")
    ascii_text = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_text.lower()).strip("-")
    return slug or "estabelecimento"
