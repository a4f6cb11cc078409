import logging

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from lendflow.core.config import DATABASE_URL, DB_ECHO, DB_POOL_SIZE, DB_MAX_OVERFLOW
from lendflow.core.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


def make_engine(url: str = DATABASE_URL, echo: bool = DB_ECHO) -> Engine:
    """
    SQLite (tests / local demo):
      - connections are shared across the worker threads
      - in-memory databases live on a single StaticPool connection
      - foreign keys are switched on for every new connection
    Anything else (PostgreSQL in production):
      - pre-ping drops dead connections automatically
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        eng = create_engine(url, echo=echo, future=True, **kwargs)

        @event.listens_for(eng, "connect")
        def _enable_foreign_keys(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return eng

    return create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=DB_POOL_SIZE,
        max_overflow=DB_MAX_OVERFLOW,
        future=True,
    )


# ---------------------
# SQLAlchemy engine / session / Base
# ---------------------
engine = make_engine()

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_connection(bind: Engine = None) -> None:
    """Round trip to the database; raises StoreUnavailableError when it is down."""
    bind = bind or engine
    try:
        with bind.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Database unreachable at %s: %s", bind.url.render_as_string(hide_password=True), e)
        raise StoreUnavailableError("Database connection failed", {"error": str(e)}) from e


def dispose_engine() -> None:
    engine.dispose()
    logger.info("Database connections released")
