import logging
from datetime import datetime, timedelta

from sqlmodel import Session, select

from agenda.core.logging import setup_logging
from agenda.core.security import get_password_hash
from agenda.database import engine, create_db_and_tables
from agenda.models.appointment import AppointmentCreate
from agenda.models.business_settings import BusinessSettings
from agenda.models.client import Client  # noqa: F401
from agenda.models.cost import Cost
from agenda.models.service import Service
from agenda.models.user import User
from agenda.services.scheduling import SchedulingService

logger = logging.getLogger("agenda.scripts.seed")

OWNER_EMAIL = "salao@agenda.dev"
OWNER_PASSWORD = "agenda123"


def main():
    setup_logging()
    create_db_and_tables()

    with Session(engine) as session:
        # 1) dono + estabelecimento
        owner = session.exec(select(User).where(User.email == OWNER_EMAIL)).first()
        if not owner:
            owner = User(
                name="Ana Souza",
                email=OWNER_EMAIL,
                password_hash=get_password_hash(OWNER_PASSWORD),
                role="owner",
            )
            session.add(owner)
            session.flush()

        biz = session.exec(
            select(BusinessSettings).where(BusinessSettings.owner_id == owner.id)
        ).first()
        if not biz:
            session.add(
                BusinessSettings(
                    owner_id=owner.id,
                    business_name="Studio Ana Souza",
                    slug="studio-ana-souza",
                    description="Cabelo, unhas e estética",
                    phone="+5511999990000",
                )
            )

        # 2) serviços de teste (se não existir)
        existing_service = session.exec(
            select(Service).where(Service.owner_id == owner.id)
        ).first()

        if not existing_service:
            corte = Service(name="Corte", duration_minutes=30, price=60.0, category="Cabelo", owner_id=owner.id)
            escova = Service(name="Escova", duration_minutes=60, price=80.0, category="Cabelo", owner_id=owner.id)
            mao = Service(name="Manicure", duration_minutes=45, price=40.0, category="Unhas", owner_id=owner.id)
            session.add_all([corte, escova, mao])
            session.flush()
            session.add(
                Service(
                    name="Corte + Escova",
                    kind="combo",
                    included_service_ids=[corte.id, escova.id],
                    duration_minutes=corte.duration_minutes + escova.duration_minutes,
                    price=120.0,
                    original_price=corte.price + escova.price,
                    category="Cabelo",
                    owner_id=owner.id,
                )
            )

        # 3) custo fixo do mês
        today = datetime.now().date()
        if not session.exec(select(Cost).where(Cost.owner_id == owner.id)).first():
            session.add(
                Cost(owner_id=owner.id, title="Aluguel", category="Fixo", value=2500.0,
                     date=today.replace(day=1), status="paid", recurrence="monthly")
            )

        session.commit()

        # 4) um agendamento amanhã às 10:00 (se o horário estiver livre)
        tomorrow = today + timedelta(days=1)
        service = session.exec(
            select(Service).where(Service.owner_id == owner.id, Service.name == "Escova")
        ).first()
        scheduling = SchedulingService(session)
        slots = scheduling.available_slots(owner.id, tomorrow, service_id=service.id).slots
        if "10:00" in slots:
            scheduling.create(
                owner.id,
                AppointmentCreate(
                    client_name="Maria",
                    client_phone="+5511999990000",
                    service_id=service.id,
                    date=tomorrow,
                    start_time="10:00",
                ),
            )

        logger.info("Seed concluído: dono %s (%s / %s)", owner.id, OWNER_EMAIL, OWNER_PASSWORD)
        logger.info("Página pública: /public/studio-ana-souza")


if __name__ == "__main__":
    main()
