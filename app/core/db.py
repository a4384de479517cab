"""Engine, fábrica de sesiones y base declarativa de los modelos."""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.core.config import settings


def build_engine(url: str, **options) -> Engine:
    """Engine para ``url``. SQLite (local/tests) no usa pool de conexiones."""
    if url.lower().startswith("sqlite"):
        options.setdefault("connect_args", {"check_same_thread": False})
    else:
        options.setdefault("pool_pre_ping", True)
        options.setdefault("pool_size", settings.DB_POOL_SIZE)
        options.setdefault("max_overflow", settings.DB_MAX_OVERFLOW)
    return create_engine(url, echo=settings.SQL_ECHO, **options)


engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Una sesión por request; se cierra siempre al terminar."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
