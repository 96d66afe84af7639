import re
import unicodedata
from datetime import date, datetime, time, timezone
from typing import Iterable, Union

from agenda.core.exceptions import InvalidTime, ValidationFailure

MINUTES_PER_DAY = 24 * 60

# segundos só são aceitos quando zerados ("09:00:00")
_HHMM = re.compile(r"^(\d{1,2}):(\d{2})(?::00)?$")

# 0=segunda ... 6=domingo (mesmo índice de date.weekday())
WEEKDAY_CODES = ("seg", "ter", "qua", "qui", "sex", "sab", "dom")
WEEKDAY_LABELS = ("Seg", "Ter", "Qua", "Qui", "Sex", "Sáb", "Dom")

TimeLike = Union[str, time, int]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_minutes(value: TimeLike) -> int:
    """
    Converte 'HH:MM' (ou time, ou minutos) em minuto do dia.

    '24:00' vale 1440: serve como término ou fechamento à meia-noite.
    """
    if isinstance(value, bool):
        raise InvalidTime()

    if isinstance(value, int):
        minutes = value
    elif isinstance(value, time):
        if value.second or value.microsecond:
            raise InvalidTime(f"Horário inválido: '{value}', use HH:MM")
        minutes = value.hour * 60 + value.minute
    elif isinstance(value, str):
        match = _HHMM.match(value.strip())
        if not match:
            raise InvalidTime(f"Horário inválido: '{value}', use HH:MM")
        hours, mins = int(match.group(1)), int(match.group(2))
        if mins > 59 or hours > 24 or (hours == 24 and mins):
            raise InvalidTime(f"Horário inválido: '{value}', use HH:MM")
        minutes = hours * 60 + mins
    else:
        raise InvalidTime()

    if minutes < 0 or minutes > MINUTES_PER_DAY:
        raise InvalidTime(f"Horário fora do dia: {value}")
    return minutes


def format_minutes(minutes: int) -> str:
    """Minuto do dia -> 'HH:MM' (1440 -> '24:00')."""
    if minutes < 0 or minutes > MINUTES_PER_DAY:
        raise InvalidTime(f"Horário fora do dia: {minutes} min")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_time(value: TimeLike) -> str:
    return format_minutes(to_minutes(value))


def add_minutes(value: TimeLike, minutes: int) -> str:
    """
    Soma minutos a um horário. O resultado precisa cair no mesmo dia
    (um atendimento não atravessa a meia-noite).
    """
    return format_minutes(to_minutes(value) + minutes)


def overlaps(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Retorna True se [a_start, a_end) sobrepõe [b_start, b_end)."""
    return a_start < b_end and b_start < a_end


def parse_date(value: Union[str, date]) -> date:
    """Aceita date ou 'YYYY-MM-DD'."""
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        raise ValidationFailure(f"Data inválida: '{value}', use YYYY-MM-DD")


def weekday_index(code: Union[str, int]) -> int:
    """
    'Seg'/'Sáb'/'dom' ou 0..6 -> índice de date.weekday().
    """
    if isinstance(code, bool):
        raise ValidationFailure(f"Dia da semana inválido: {code}")
    if isinstance(code, int):
        if 0 <= code <= 6:
            return code
        raise ValidationFailure(f"Dia da semana inválido: {code}")

    text = str(code).strip()
    if text.isdigit():
        return weekday_index(int(text))

    key = _strip_accents(text).lower()[:3]
    if key not in WEEKDAY_CODES:
        raise ValidationFailure(f"Dia da semana inválido: '{code}'")
    return WEEKDAY_CODES.index(key)


def parse_open_days(codes: Iterable[Union[str, int]]) -> frozenset:
    return frozenset(weekday_index(c) for c in codes)


def format_open_days(days: Iterable[int]) -> list:
    return [WEEKDAY_LABELS[d] for d in sorted(set(days))]


def _strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))
