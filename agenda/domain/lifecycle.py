"""
Ciclo de vida de um agendamento.

Funções puras sobre um objeto de agendamento (qualquer objeto com
`id`, `date`, `start_time`, `end_time`, `status`, `payment_method`,
`satisfaction_score`). Todas validam tudo antes de alterar qualquer campo,
então uma falha nunca deixa o objeto pela metade.
"""

import unicodedata
from datetime import date, datetime
from enum import Enum
from typing import Iterable, Optional

from agenda.core.exceptions import (
    InvalidDuration,
    InvalidScore,
    InvalidTime,
    InvalidTransition,
    OutsideBusinessHours,
    SlotConflict,
    ValidationFailure,
)
from agenda.domain.availability import BusinessHours
from agenda.domain.status import (
    AppointmentStatus,
    as_status,
    ensure_transition,
    is_blocking,
    is_terminal,
)
from agenda.domain.timeutils import MINUTES_PER_DAY, format_minutes, overlaps, to_minutes

MIN_SCORE = 0
MAX_SCORE = 10


class PaymentMethod(str, Enum):
    PIX = "pix"
    CREDIT = "credito"
    DEBIT = "debito"
    CASH = "dinheiro"


def parse_payment_method(value) -> PaymentMethod:
    if isinstance(value, PaymentMethod):
        return value
    if not value or not str(value).strip():
        raise ValidationFailure("Forma de pagamento é obrigatória para finalizar")
    key = unicodedata.normalize("NFKD", str(value).strip().lower())
    key = "".join(ch for ch in key if not unicodedata.combining(ch))
    try:
        return PaymentMethod(key)
    except ValueError:
        raise ValidationFailure(f"Forma de pagamento inválida: '{value}'")


def validate_score(score) -> Optional[int]:
    if score is None:
        return None
    if isinstance(score, bool) or not isinstance(score, int):
        raise InvalidScore()
    if score < MIN_SCORE or score > MAX_SCORE:
        raise InvalidScore()
    return score


def compute_interval(start_time, duration_minutes: int) -> tuple:
    """(start, end) em minutos; o atendimento precisa terminar no mesmo dia."""
    if duration_minutes is None or duration_minutes <= 0:
        raise InvalidDuration()
    start = to_minutes(start_time)
    end = start + duration_minutes
    if end > MINUTES_PER_DAY:
        raise InvalidTime("O atendimento não pode passar da meia-noite")
    return start, end


def appointment_duration(appt) -> int:
    return to_minutes(appt.end_time) - to_minutes(appt.start_time)


def find_conflict(start: int, end: int, day_appointments: Iterable, exclude_id=None):
    """Primeiro agendamento que ainda ocupa a agenda e sobrepõe [start, end)."""
    for other in day_appointments:
        if exclude_id is not None and other.id == exclude_id:
            continue
        if not is_blocking(other.status):
            continue
        if overlaps(start, end, to_minutes(other.start_time), to_minutes(other.end_time)):
            return other
    return None


def ensure_slot_free(start: int, end: int, day_appointments: Iterable, exclude_id=None) -> None:
    other = find_conflict(start, end, day_appointments, exclude_id=exclude_id)
    if other is not None:
        raise SlotConflict(
            f"Horário indisponível: conflito com {other.start_time}-{other.end_time}",
            conflicting_id=other.id,
        )


def ensure_within_hours(day: date, start: int, end: int, hours: Optional[BusinessHours]) -> None:
    if hours is None:
        return
    hours.validate()
    if not hours.is_open_on(day):
        raise OutsideBusinessHours("Estabelecimento fechado nesse dia")
    if not hours.fits(start, end):
        raise OutsideBusinessHours(
            f"Fora do horário de funcionamento ({hours.open_time}-{hours.close_time})"
        )


# =========================
# CRIAÇÃO
# =========================

def plan_booking(
    day: date,
    start_time,
    duration_minutes: int,
    day_appointments: Iterable,
    hours: Optional[BusinessHours] = None,
) -> tuple:
    """
    Valida um novo agendamento e devolve (start_time, end_time) canônicos.
    """
    start, end = compute_interval(start_time, duration_minutes)
    ensure_within_hours(day, start, end, hours)
    ensure_slot_free(start, end, day_appointments)
    return format_minutes(start), format_minutes(end)


def ensure_not_past(day: date, start_time, now: datetime) -> None:
    """Agendamento online não volta no tempo."""
    if day < now.date():
        raise ValidationFailure("Não é possível agendar em uma data passada")
    if day == now.date() and to_minutes(start_time) <= now.hour * 60 + now.minute:
        raise ValidationFailure("Esse horário já passou")


def ensure_offered(start_time, offered_slots) -> None:
    """Só vale um início que a grade de horários livres oferece."""
    if format_minutes(to_minutes(start_time)) not in offered_slots:
        raise InvalidTime(f"Horário {start_time} não está disponível para agendamento online")


def initial_status(requested=None) -> AppointmentStatus:
    """Agendamentos nascem confirmados; a equipe pode optar por pending."""
    if requested is None:
        return AppointmentStatus.CONFIRMED
    status = as_status(requested)
    if status not in (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED):
        raise InvalidTransition(message=f"Agendamento não pode ser criado como '{status.value}'")
    return status


# =========================
# TRANSIÇÕES
# =========================

def confirm(appt) -> None:
    """pending -> confirmed (confirmação manual da equipe)."""
    current = as_status(appt.status)
    if current != AppointmentStatus.PENDING:
        raise InvalidTransition(current, AppointmentStatus.CONFIRMED)
    appt.status = ensure_transition(current, AppointmentStatus.CONFIRMED).value


def start(appt) -> None:
    current = as_status(appt.status)
    if current not in (AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED):
        raise InvalidTransition(current, AppointmentStatus.IN_PROGRESS)
    appt.status = ensure_transition(current, AppointmentStatus.IN_PROGRESS).value


def finish(appt, payment_method, satisfaction_score=None) -> None:
    score = validate_score(satisfaction_score)
    ensure_transition(appt.status, AppointmentStatus.COMPLETED)
    method = parse_payment_method(payment_method)

    appt.status = AppointmentStatus.COMPLETED.value
    appt.payment_method = method.value
    appt.satisfaction_score = score


def cancel(appt) -> bool:
    """Devolve False quando já estava cancelado (operação idempotente)."""
    if as_status(appt.status) == AppointmentStatus.CANCELED:
        return False
    appt.status = ensure_transition(appt.status, AppointmentStatus.CANCELED).value
    return True


def mark_reschedule(appt) -> None:
    """Marca como 'remarcar': libera o horário até a nova confirmação."""
    appt.status = ensure_transition(appt.status, AppointmentStatus.RESCHEDULE).value


def reschedule(
    appt,
    new_date: date,
    new_start_time,
    duration_minutes: int,
    day_appointments: Iterable,
    hours: Optional[BusinessHours] = None,
) -> None:
    """Nova data/horário, fim recalculado pela duração do serviço, status confirmed."""
    target = ensure_transition(appt.status, AppointmentStatus.CONFIRMED)
    _relocate(appt, new_date, new_start_time, duration_minutes, day_appointments, hours)
    appt.status = target.value


def move(
    appt,
    new_start_time,
    day_appointments: Iterable,
    new_date: Optional[date] = None,
    duration_minutes: Optional[int] = None,
    hours: Optional[BusinessHours] = None,
) -> None:
    """
    Arrastar na agenda: mesma regra de sobreposição do reschedule, mas o
    status só muda quando estava 'reschedule' (vira confirmed).
    """
    current = as_status(appt.status)
    if is_terminal(current):
        raise InvalidTransition(message=f"Agendamento '{current.value}' não pode ser movido")

    target = current
    if current == AppointmentStatus.RESCHEDULE:
        target = ensure_transition(current, AppointmentStatus.CONFIRMED)

    if duration_minutes is None:
        duration_minutes = appointment_duration(appt)

    _relocate(
        appt,
        new_date if new_date is not None else appt.date,
        new_start_time,
        duration_minutes,
        day_appointments,
        hours,
    )
    appt.status = target.value


def change_end_time(appt, new_end_time, day_appointments: Iterable, hours: Optional[BusinessHours] = None) -> None:
    """Edição manual do término; continua valendo a regra de sobreposição."""
    if is_terminal(appt.status):
        raise InvalidTransition(message="Agendamento encerrado não pode ser alterado")
    start_min = to_minutes(appt.start_time)
    end_min = to_minutes(new_end_time)
    if end_min <= start_min:
        raise InvalidTime("O término deve ser depois do início")
    ensure_within_hours(appt.date, start_min, end_min, hours)
    if is_blocking(appt.status):
        ensure_slot_free(start_min, end_min, day_appointments, exclude_id=appt.id)
    appt.end_time = format_minutes(end_min)


def _relocate(appt, new_date, new_start_time, duration_minutes, day_appointments, hours) -> None:
    start_min, end_min = compute_interval(new_start_time, duration_minutes)
    ensure_within_hours(new_date, start_min, end_min, hours)
    ensure_slot_free(start_min, end_min, day_appointments, exclude_id=appt.id)

    appt.date = new_date
    appt.start_time = format_minutes(start_min)
    appt.end_time = format_minutes(end_min)
