import logging

from sqlmodel import Session, SQLModel, create_engine

from agenda.core.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False):
    connect_args = {}
    if database_url.startswith("sqlite"):
        # o mesmo engine atende várias threads do servidor
        connect_args = {"check_same_thread": False}
    return create_engine(database_url, echo=echo, connect_args=connect_args)


engine = build_engine(settings.database_url, echo=settings.sql_echo)


def create_db_and_tables(bind=None):
    SQLModel.metadata.create_all(bind or engine)
    logger.info("Tabelas criadas/verificadas")


def get_session():
    with Session(engine) as session:
        yield session
