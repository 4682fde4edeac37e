import logging
from typing import Iterator, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from canteen.configuration.settings import Configuration

_engine: Optional[Engine] = None


def build_engine(database_url: str) -> Engine:
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, echo=False, pool_pre_ping=True, connect_args=connect_args)


def init_engine(configuration: Configuration) -> Engine:
    global _engine
    _engine = build_engine(configuration.connect_to_database())
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Database engine not initialized, call init_engine(configuration) first")
    return _engine


def get_session() -> Iterator[Session]:
    with Session(get_engine()) as session:
        yield session


def init_db(configuration: Configuration, engine: Optional[Engine] = None) -> None:
    from canteen import models  # noqa: F401  registers every table on the metadata
    from canteen.database.populate import populate_database

    engine = engine or get_engine()
    SQLModel.metadata.create_all(engine)
    logging.info("DATABASE >>> Tables created")

    with Session(engine) as session:
        populate_database(session, configuration)
