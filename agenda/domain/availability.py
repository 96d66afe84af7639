"""
Motor de disponibilidade.

Projeção pura sobre os agendamentos do dia: não acessa banco, não guarda
cache. Os agendamentos recebidos só precisam expor `start_time`,
`end_time` ('HH:MM') e `status`.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Tuple, Union

from agenda.core.exceptions import InvalidBusinessHours, InvalidDuration
from agenda.domain.status import is_blocking
from agenda.domain.timeutils import (
    format_minutes,
    overlaps,
    parse_date,
    parse_open_days,
    to_minutes,
)

DEFAULT_SLOT_GRANULARITY = 30


@dataclass(frozen=True)
class BusinessHours:
    open_days: frozenset  # índices 0=segunda ... 6=domingo
    open_time: str
    close_time: str

    @classmethod
    def build(cls, open_days: Iterable, open_time, close_time) -> "BusinessHours":
        """Aceita códigos 'Seg'..'Dom' ou 0..6 e horários 'HH:MM'."""
        return cls(
            open_days=parse_open_days(open_days),
            open_time=format_minutes(to_minutes(open_time)),
            close_time=format_minutes(to_minutes(close_time)),
        )

    @property
    def open_minute(self) -> int:
        return to_minutes(self.open_time)

    @property
    def close_minute(self) -> int:
        return to_minutes(self.close_time)

    def validate(self) -> None:
        if self.open_minute >= self.close_minute:
            raise InvalidBusinessHours()

    def is_open_on(self, day: date) -> bool:
        return day.weekday() in self.open_days

    def fits(self, start: int, end: int) -> bool:
        """O intervalo [start, end) cabe inteiro no expediente."""
        return self.open_minute <= start and end <= self.close_minute


def busy_intervals(appointments: Iterable, exclude_id=None) -> List[Tuple[int, int]]:
    """Intervalos (em minutos) dos agendamentos que ainda ocupam a agenda."""
    busy = []
    for appt in appointments:
        if exclude_id is not None and getattr(appt, "id", None) == exclude_id:
            continue
        if not is_blocking(appt.status):
            continue
        busy.append((to_minutes(appt.start_time), to_minutes(appt.end_time)))
    return busy


def get_available_slots(
    day: Union[str, date],
    duration_minutes: int,
    business_hours: BusinessHours,
    existing_appointments: Iterable,
    slot_granularity_minutes: int = DEFAULT_SLOT_GRANULARITY,
) -> List[str]:
    """
    Horários de início livres no dia, em ordem crescente.

    - dia fora de open_days -> lista vazia
    - o serviço precisa terminar até o fechamento (limite inclusivo)
    - bloqueiam apenas pending/confirmed/in_progress
    """
    if duration_minutes is None or duration_minutes <= 0:
        raise InvalidDuration()
    if slot_granularity_minutes is None or slot_granularity_minutes <= 0:
        raise InvalidDuration("Intervalo da grade deve ser positivo")
    business_hours.validate()

    day = parse_date(day)
    if not business_hours.is_open_on(day):
        return []

    busy = busy_intervals(existing_appointments)
    close = business_hours.close_minute

    slots: List[str] = []
    current = business_hours.open_minute

    while current < close:
        end = current + duration_minutes
        if end > close:
            break

        if not any(overlaps(current, end, b_start, b_end) for b_start, b_end in busy):
            slots.append(format_minutes(current))

        current += slot_granularity_minutes

    return slots
