from __future__ import annotations

from contextlib import contextmanager

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from santa.db.models import Base

SessionLocal = sessionmaker(autoflush=False, expire_on_commit=False)


def init_engine(database_url: str, create_tables: bool = True):
    engine = create_engine(database_url, future=True)
    if create_tables:
        Base.metadata.create_all(engine)
    SessionLocal.configure(bind=engine)
    logger.bind(url=engine.url.render_as_string(hide_password=True)).debug("Draw history ready")
    return engine


@contextmanager
def get_session():
    if SessionLocal.kw.get("bind") is None:
        raise RuntimeError("Draw history not initialized. Call init_engine() before use.")
    with SessionLocal() as session:
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
