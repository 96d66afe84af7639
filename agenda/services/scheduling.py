"""
Gerenciador do ciclo de vida dos agendamentos.

Toda mutação passa por aqui: segura o lock do tenant, relê os agendamentos
do dia, aplica a regra pura de agenda.domain e faz um único commit. Se algo
falhar a transação é desfeita e nada fica pela metade.
"""

import logging
from contextlib import contextmanager
from datetime import date, datetime
from typing import List, Optional

from sqlmodel import Session

from agenda.core.config import settings
from agenda.core.exceptions import (
    AppointmentNotFound,
    ClientNotFound,
    ConflictError,
    InvalidDuration,
    ServiceNotFound,
    ValidationFailure,
)
from agenda.domain import lifecycle
from agenda.domain.availability import get_available_slots
from agenda.domain.timeutils import utcnow
from agenda.models.appointment import Appointment, AppointmentCreate, AvailableSlots
from agenda.repositories import AppointmentRepository, store_guard

logger = logging.getLogger(__name__)


class SchedulingService:
    def __init__(self, session: Session):
        self.session = session
        self.repo = AppointmentRepository(session)

    # =========================
    # LEITURA
    # =========================
    def list_appointments(
        self,
        business_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
        statuses: Optional[List[str]] = None,
    ) -> List[Appointment]:
        with store_guard(self.session):
            return self.repo.list_appointments(business_id, start, end, statuses)

    def get_appointment(self, business_id: int, appointment_id: int) -> Appointment:
        appt = self.repo.get_appointment(business_id, appointment_id)
        if appt is None:
            raise AppointmentNotFound()
        return appt

    def available_slots(
        self,
        business_id: int,
        day: date,
        service_id: Optional[int] = None,
        duration_minutes: Optional[int] = None,
        active_only: bool = False,
    ) -> AvailableSlots:
        """Horários livres do dia para um serviço do catálogo ou uma duração avulsa."""
        with store_guard(self.session):
            if service_id is not None:
                service = self._get_service(business_id, service_id, active_only=active_only)
                duration_minutes = service.duration_minutes
            if duration_minutes is None:
                raise InvalidDuration("Informe service_id ou duration_minutes")

            biz = self.repo.get_settings(business_id)
            step = self._granularity(biz)

            if biz is None:
                if duration_minutes <= 0:
                    raise InvalidDuration()
                return AvailableSlots(
                    day=day, is_closed=True, duration_minutes=duration_minutes, slot_step_minutes=step
                )

            hours = biz.business_hours()
            existing = self.repo.list_day(business_id, day)

        slots = get_available_slots(day, duration_minutes, hours, existing, step)
        return AvailableSlots(
            day=day,
            is_closed=not hours.is_open_on(day),
            duration_minutes=duration_minutes,
            slot_step_minutes=step,
            open_time=hours.open_time,
            close_time=hours.close_time,
            slots=slots,
        )

    # =========================
    # CRIAÇÃO
    # =========================
    def create(self, business_id: int, data: AppointmentCreate, origin: str = "staff") -> Appointment:
        public = origin == "public"
        with self._write(business_id):
            service, name, duration, price = self._resolve_service(business_id, data, active_only=public)
            biz = self.repo.get_settings(business_id)
            hours = biz.business_hours() if biz is not None else None
            day_appointments = self.repo.list_day(business_id, data.date)

            if public:
                lifecycle.ensure_not_past(data.date, data.start_time, datetime.now())
            start_time, end_time = lifecycle.plan_booking(
                data.date, data.start_time, duration, day_appointments, hours
            )
            # pela página pública só valem os horários que a grade oferece
            if public and hours is not None:
                offered = get_available_slots(
                    data.date, duration, hours, day_appointments, self._granularity(biz)
                )
                lifecycle.ensure_offered(start_time, offered)
            status = lifecycle.initial_status(data.status)

            client = self._resolve_client(business_id, data)

            appt = Appointment(
                owner_id=business_id,
                client_id=client.id,
                service_id=service.id if service else None,
                date=data.date,
                start_time=start_time,
                end_time=end_time,
                service_name_snapshot=name,
                service_duration_snapshot=duration,
                status=status.value,
                value=data.value if data.value is not None else price,
                cost=data.cost,
                origin=origin,
                notes=data.notes,
            )
            self.repo.upsert_appointment(appt)
            self.session.commit()
            self.session.refresh(appt)

        logger.info(
            "Agendamento %s criado (%s %s-%s, tenant %s, origem %s)",
            appt.id, appt.date, appt.start_time, appt.end_time, business_id, origin,
        )
        return appt

    # =========================
    # TRANSIÇÕES
    # =========================
    def confirm(self, business_id: int, appointment_id: int) -> Appointment:
        return self._transition(business_id, appointment_id, "confirm", lifecycle.confirm)

    def start(self, business_id: int, appointment_id: int) -> Appointment:
        return self._transition(business_id, appointment_id, "start", lifecycle.start)

    def finish(
        self,
        business_id: int,
        appointment_id: int,
        payment_method: str,
        satisfaction_score: Optional[int] = None,
    ) -> Appointment:
        return self._transition(
            business_id,
            appointment_id,
            "finish",
            lambda appt: lifecycle.finish(appt, payment_method, satisfaction_score),
        )

    def cancel(self, business_id: int, appointment_id: int) -> Appointment:
        def _cancel(appt):
            if lifecycle.cancel(appt):
                appt.canceled_at = utcnow()

        return self._transition(business_id, appointment_id, "cancel", _cancel)

    def mark_reschedule(self, business_id: int, appointment_id: int) -> Appointment:
        return self._transition(business_id, appointment_id, "mark_reschedule", lifecycle.mark_reschedule)

    def reschedule(self, business_id: int, appointment_id: int, new_date: date, new_start_time: str) -> Appointment:
        with self._write(business_id):
            appt = self.get_appointment(business_id, appointment_id)
            duration = self._duration_of(business_id, appt)
            lifecycle.reschedule(
                appt,
                new_date,
                new_start_time,
                duration,
                self.repo.list_day(business_id, new_date),
                self.repo.get_business_hours(business_id),
            )
            return self._save(appt, "reschedule")

    def move(
        self,
        business_id: int,
        appointment_id: int,
        new_start_time: str,
        new_date: Optional[date] = None,
    ) -> Appointment:
        with self._write(business_id):
            appt = self.get_appointment(business_id, appointment_id)
            target_day = new_date if new_date is not None else appt.date
            lifecycle.move(
                appt,
                new_start_time,
                self.repo.list_day(business_id, target_day),
                new_date=new_date,
                duration_minutes=lifecycle.appointment_duration(appt),
                hours=self.repo.get_business_hours(business_id),
            )
            return self._save(appt, "move")

    def update_details(self, business_id: int, appointment_id: int, updates: dict) -> Appointment:
        """Término, valor, custo e observações editados pela equipe."""
        with self._write(business_id):
            appt = self.get_appointment(business_id, appointment_id)
            end_time = updates.pop("end_time", None)
            if end_time is not None:
                lifecycle.change_end_time(
                    appt,
                    end_time,
                    self.repo.list_day(business_id, appt.date),
                    self.repo.get_business_hours(business_id),
                )
            for key in ("value", "cost", "notes"):
                if key in updates:
                    setattr(appt, key, updates[key])
            return self._save(appt, "update")

    # =========================
    # INTERNOS
    # =========================
    @contextmanager
    def _write(self, business_id: int):
        try:
            with store_guard(self.session), self.repo.lock_business(business_id):
                yield
        except (ConflictError, ValidationFailure) as exc:
            logger.warning("Tenant %s: operação rejeitada (%s): %s", business_id, exc.kind, exc.message)
            raise

    def _transition(self, business_id: int, appointment_id: int, action: str, apply) -> Appointment:
        with self._write(business_id):
            appt = self.get_appointment(business_id, appointment_id)
            apply(appt)
            return self._save(appt, action)

    def _save(self, appt: Appointment, action: str) -> Appointment:
        appt.updated_at = utcnow()
        self.repo.upsert_appointment(appt)
        self.session.commit()
        self.session.refresh(appt)
        logger.info(
            "Agendamento %s: %s -> %s %s-%s %s",
            appt.id, action, appt.date, appt.start_time, appt.end_time, appt.status,
        )
        return appt

    def _get_service(self, business_id: int, service_id: int, active_only: bool = False):
        service = self.repo.get_service(business_id, service_id)
        if service is None or (active_only and not service.active):
            raise ServiceNotFound()
        return service

    def _resolve_service(self, business_id: int, data: AppointmentCreate, active_only: bool = False):
        """(service, nome, duração, preço) do catálogo ou avulso."""
        if data.service_id is not None:
            service = self._get_service(business_id, data.service_id, active_only=active_only)
            return service, service.name, service.duration_minutes, service.price

        if not data.service_name or data.duration_minutes is None:
            raise ValidationFailure("Informe service_id ou service_name + duration_minutes")
        if data.duration_minutes <= 0:
            raise InvalidDuration()
        return None, data.service_name, data.duration_minutes, data.value or 0.0

    def _resolve_client(self, business_id: int, data: AppointmentCreate):
        if data.client_id is not None:
            client = self.repo.get_client(business_id, data.client_id)
            if client is None:
                raise ClientNotFound()
            return client

        if not (data.client_name or data.client_phone):
            raise ValidationFailure("Informe o cliente (client_id ou nome/telefone)")
        return self.repo.find_or_create_client(
            business_id, data.client_phone, data.client_name, email=data.client_email
        )

    def _duration_of(self, business_id: int, appt: Appointment) -> int:
        """Duração do serviço do catálogo; avulso usa a duração registrada."""
        if appt.service_id is not None:
            service = self.repo.get_service(business_id, appt.service_id)
            if service is not None:
                return service.duration_minutes
        return appt.service_duration_snapshot or lifecycle.appointment_duration(appt)

    @staticmethod
    def _granularity(biz) -> int:
        if biz is not None and biz.slot_granularity_minutes:
            return biz.slot_granularity_minutes
        return settings.slot_granularity_minutes
