from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

from dropout_monitor.core.config import settings


def build_engine(url: str) -> Engine:
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(url, future=True, connect_args=connect_args)


def build_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=bind
    )


engine = build_engine(settings.DATABASE_URL)

SessionLocal = build_session_factory(engine)

Base = declarative_base()


def init_db(bind: Engine) -> None:
    # Register the mapped tables on Base before creating them
    from dropout_monitor.models import student, risk_evaluation  # noqa: F401

    Base.metadata.create_all(bind=bind)


def get_db(request: Request):
    # Each app carries the session factory for its own DATABASE_URL
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
