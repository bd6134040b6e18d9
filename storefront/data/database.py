# storefront/data/database.py
from typing import Generator

from sqlalchemy import create_engine, text
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from storefront.utils.settings import DATABASE_URL, STORAGE_TIMEOUT_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

Base = declarative_base()


def engine_options(url: str) -> dict:
    """Engine kwargs bounding every round-trip by STORAGE_TIMEOUT_SECONDS."""
    options = {"pool_pre_ping": True}
    if url.startswith("sqlite"):
        options["connect_args"] = {"timeout": STORAGE_TIMEOUT_SECONDS, "check_same_thread": False}
    else:
        # statement_timeout w ms, po przekroczeniu postgres anuluje zapytanie
        timeout_ms = int(STORAGE_TIMEOUT_SECONDS * 1000)
        options["pool_timeout"] = STORAGE_TIMEOUT_SECONDS
        options["connect_args"] = {
            "connect_timeout": max(1, int(STORAGE_TIMEOUT_SECONDS)),
            "options": f"-c statement_timeout={timeout_ms}",
        }
    return options


engine = create_engine(DATABASE_URL, **engine_options(DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db() -> None:
    # import modeli zeby zarejestrowaly sie w Base.metadata
    import storefront.data.models  # noqa: F401

    logger.info("Creating tables", tables=list(Base.metadata.tables.keys()))
    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request."""
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error("Database session error, rolling back", error=str(e), error_type=type(e).__name__)
        db.rollback()
        raise
    finally:
        db.close()


def check_database(db: Session) -> bool:
    db.execute(text("SELECT 1"))
    return True
