from fastapi import Request
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, Session, create_engine

from dishdash.core.config import get_settings

settings = get_settings()

engine = create_engine(settings.database_url, echo=settings.sql_echo)


def register_models() -> None:
    """Imports every table module so SQLModel.metadata knows all tables."""
    from dishdash.models import (  # noqa: F401
        account,
        friend,
        invite,
        restaurant,
        session,
        todo_eat_list,
        user,
        verification_token,
        visit,
    )


def create_db_and_tables(bind: Engine = engine):
    register_models()
    SQLModel.metadata.create_all(bind)


def get_session(request: Request):
    with Session(request.app.state.engine) as session:
        yield session
