"""
Erros do domínio de agendamento.

Cada erro carrega um `kind` estável (devolvido ao cliente HTTP) e o
status HTTP usado pelo handler registrado em agenda.main.
"""


class AgendaError(Exception):
    """Base de todos os erros da agenda."""

    kind = "AgendaError"
    status_code = 400
    default_message = "Erro na agenda"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# =========================
# VALIDAÇÃO (erro do chamador, nunca repetir)
# =========================

class ValidationFailure(AgendaError):
    kind = "ValidationFailure"


class InvalidDuration(ValidationFailure):
    kind = "InvalidDuration"
    default_message = "Duração inválida: escolha um serviço com duração positiva"


class InvalidBusinessHours(ValidationFailure):
    kind = "InvalidBusinessHours"
    default_message = "Horário de funcionamento inválido: abertura deve ser antes do fechamento"


class InvalidScore(ValidationFailure):
    kind = "InvalidScore"
    default_message = "Nota de satisfação deve estar entre 0 e 10"


class InvalidTime(ValidationFailure):
    kind = "InvalidTime"
    default_message = "Horário inválido, use HH:MM"


class OutsideBusinessHours(ValidationFailure):
    kind = "OutsideBusinessHours"
    default_message = "Fora do horário de funcionamento"


class InvalidTransition(ValidationFailure):
    kind = "InvalidTransition"
    status_code = 409
    default_message = "Transição de status não permitida"

    def __init__(self, current=None, target=None, message: str | None = None):
        self.current = current
        self.target = target
        if message is None and current is not None and target is not None:
            message = f"Não é possível passar de '{_value(current)}' para '{_value(target)}'"
        super().__init__(message)


# =========================
# CONFLITO (outro agendamento ocupou o intervalo)
# =========================

class ConflictError(AgendaError):
    kind = "ConflictError"
    status_code = 409


class SlotConflict(ConflictError):
    kind = "SlotConflict"
    default_message = "Horário indisponível, escolha outro horário"

    def __init__(self, message: str | None = None, conflicting_id: int | None = None):
        self.conflicting_id = conflicting_id
        super().__init__(message)


# =========================
# NÃO ENCONTRADO
# =========================

class NotFoundError(AgendaError):
    kind = "NotFound"
    status_code = 404
    default_message = "Registro não encontrado"


class AppointmentNotFound(NotFoundError):
    kind = "AppointmentNotFound"
    default_message = "Agendamento não encontrado"


class ServiceNotFound(NotFoundError):
    kind = "ServiceNotFound"
    default_message = "Serviço não encontrado ou inativo"


class ClientNotFound(NotFoundError):
    kind = "ClientNotFound"
    default_message = "Cliente não encontrado"


class BusinessNotFound(NotFoundError):
    kind = "BusinessNotFound"
    default_message = "Estabelecimento não encontrado"


# =========================
# INFRAESTRUTURA (transitório, nenhuma escrita parcial)
# =========================

class InfrastructureError(AgendaError):
    kind = "InfrastructureError"
    status_code = 503


class StoreUnavailable(InfrastructureError):
    kind = "StoreUnavailable"
    default_message = "Banco de dados indisponível, tente novamente"


def _value(status) -> str:
    return getattr(status, "value", status)
