"""WaterWise — Database Engine & Session Factory.

SQLite by default; any SQLAlchemy URL (PostgreSQL in production) via
``DATABASE_URL``.
"""

from sqlalchemy import text
from sqlalchemy.engine import Engine, make_url
from sqlmodel import SQLModel, Session, create_engine

from waterwise.config import settings
from waterwise.core.logging import get_logger

logger = get_logger("database")


def _safe_url(url: str) -> str:
    """URL with the password hidden, for logging."""
    return make_url(url).render_as_string(hide_password=True)


def build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        logger.info(f"📦 Records store: SQLite ({url})")
        return create_engine(url, echo=False, connect_args={"check_same_thread": False})

    logger.info(f"🐘 Records store: {_safe_url(url)}")
    return create_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        pool_recycle=300,
    )


engine = build_engine(settings.effective_database_url)


def check_connection() -> bool:
    """Run SELECT 1 against the store."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("✅ Records store reachable")
        return True
    except Exception as e:
        logger.error(f"❌ Records store unreachable: {e}")
        return False


def init_db() -> None:
    """Create the usage, bills and cache tables."""
    # Table classes must be imported so they register on the metadata
    from waterwise.models import records  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("✅ Tables usage, bills, cache ready")


def get_session():
    """Dependency — yields a DB session."""
    with Session(engine) as session:
        yield session
