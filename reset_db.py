import logging

from sqlalchemy import text
from sqlmodel import Session

from dishdash.database import engine

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

with Session(engine) as session:
    session.execute(text("DROP SCHEMA public CASCADE"))
    session.execute(text("CREATE SCHEMA public"))
    session.commit()

logging.getLogger("reset_db").info("Database reset, every table in the public schema was dropped")
