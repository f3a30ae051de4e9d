"""Module: session."""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from medsguardian.core.config import settings


def make_engine(database_url: str) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)


# Both stay None when DATABASE_URL is not set; storage treats that as
# "unconfigured" rather than failing at import time.
engine = make_engine(settings.database_url) if settings.database_url else None
SessionLocal = make_session_factory(engine) if engine is not None else None
