"""
Duas reservas simultâneas para o mesmo intervalo: só uma pode passar.

Usa um arquivo SQLite (uma conexão por thread) para que cada requisição
tenha a sua própria sessão, como no servidor.
"""

import threading
from datetime import date

import pytest
from sqlmodel import Session, SQLModel, select

from agenda.core.exceptions import SlotConflict
from agenda.database import build_engine
from agenda.models.appointment import Appointment, AppointmentCreate
from agenda.services.scheduling import SchedulingService

from conftest import make_owner, make_service

MONDAY = date(2026, 2, 16)


@pytest.fixture
def file_engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'agenda.db'}")
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


def _race(engine, owner_id, service_id, starts):
    barrier = threading.Barrier(len(starts))
    outcomes = []
    outcomes_lock = threading.Lock()

    def book(index, start_time):
        with Session(engine) as session:
            barrier.wait()
            try:
                appt = SchedulingService(session).create(
                    owner_id,
                    AppointmentCreate(
                        client_name=f"Cliente {index}",
                        client_phone=f"+55119000000{index:02d}",
                        service_id=service_id,
                        date=MONDAY,
                        start_time=start_time,
                    ),
                )
                result = ("ok", appt.start_time)
            except SlotConflict:
                result = ("conflict", start_time)
        with outcomes_lock:
            outcomes.append(result)

    threads = [threading.Thread(target=book, args=(i, s)) for i, s in enumerate(starts)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    return outcomes


def test_two_overlapping_bookings_only_one_wins(file_engine):
    with Session(file_engine) as session:
        owner = make_owner(session)
        service = make_service(session, owner, "Escova", 60)
        owner_id, service_id = owner.id, service.id

    outcomes = _race(file_engine, owner_id, service_id, ["14:00", "14:30"])

    assert sorted(kind for kind, _ in outcomes) == ["conflict", "ok"]

    with Session(file_engine) as session:
        stored = session.exec(select(Appointment)).all()
    assert len(stored) == 1


def test_many_bookings_for_same_slot(file_engine):
    with Session(file_engine) as session:
        owner = make_owner(session)
        service = make_service(session, owner, "Corte", 30)
        owner_id, service_id = owner.id, service.id

    outcomes = _race(file_engine, owner_id, service_id, ["10:00"] * 6)

    assert [kind for kind, _ in outcomes].count("ok") == 1
    assert [kind for kind, _ in outcomes].count("conflict") == 5
