from __future__ import annotations

from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

from fuel_procurement.core.config import Settings, get_settings


def engine_options(settings: Settings) -> Dict[str, Any]:
    """
    Bounded waits for every database interaction: connect, statement and
    pool checkout all time out instead of hanging the request.
    """
    url = make_url(settings.database_url)

    if url.get_backend_name() == "sqlite":
        return {
            "connect_args": {
                "timeout": settings.db_connect_timeout_seconds,
                "check_same_thread": False,
            },
        }

    connect_args: Dict[str, Any] = {
        "connect_timeout": settings.db_connect_timeout_seconds,
    }
    if url.get_backend_name() == "postgresql":
        connect_args["options"] = (
            f"-c statement_timeout={settings.db_statement_timeout_ms}"
        )

    return {
        "pool_pre_ping": True,
        "pool_timeout": settings.db_pool_timeout_seconds,
        "connect_args": connect_args,
    }


settings = get_settings()

DATABASE_URL = settings.database_url  # fail fast if missing

engine = create_engine(DATABASE_URL, **engine_options(settings))

SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
