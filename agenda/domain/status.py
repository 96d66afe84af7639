from enum import Enum

from agenda.core.exceptions import InvalidTransition


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELED = "canceled"
    RESCHEDULE = "reschedule"


# ocupam tempo na agenda
BLOCKING_STATUSES = frozenset(
    {AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED, AppointmentStatus.IN_PROGRESS}
)

TERMINAL_STATUSES = frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELED})

NON_TERMINAL_STATUSES = frozenset(AppointmentStatus) - TERMINAL_STATUSES


# origem -> destinos permitidos
ALLOWED_TRANSITIONS = {
    AppointmentStatus.PENDING: frozenset({
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.IN_PROGRESS,
        AppointmentStatus.CANCELED,
        AppointmentStatus.RESCHEDULE,
    }),
    AppointmentStatus.CONFIRMED: frozenset({
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.IN_PROGRESS,
        AppointmentStatus.CANCELED,
        AppointmentStatus.RESCHEDULE,
    }),
    AppointmentStatus.IN_PROGRESS: frozenset({
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELED,
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.RESCHEDULE,
    }),
    AppointmentStatus.RESCHEDULE: frozenset({
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.CANCELED,
    }),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELED: frozenset(),
}


def as_status(value) -> AppointmentStatus:
    try:
        return AppointmentStatus(value)
    except ValueError:
        raise InvalidTransition(message=f"Status desconhecido: '{value}'")


def is_blocking(status) -> bool:
    return as_status(status) in BLOCKING_STATUSES


def is_terminal(status) -> bool:
    return as_status(status) in TERMINAL_STATUSES


def can_transition(current, target) -> bool:
    return as_status(target) in ALLOWED_TRANSITIONS[as_status(current)]


def ensure_transition(current, target) -> AppointmentStatus:
    """
    Único ponto que decide se uma mudança de status é permitida.

    Levanta InvalidTransition quando não é; devolve o status de destino.
    """
    current, target = as_status(current), as_status(target)
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransition(current, target)
    return target
