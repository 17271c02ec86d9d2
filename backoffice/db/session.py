import logging
import socket
from contextlib import closing

from sqlalchemy import create_engine, text
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from backoffice.core.config import settings

logger = logging.getLogger(__name__)

_engine = None


def _report_connection_failure(exc: Exception) -> None:
    """Log high-signal diagnostics when the application cannot reach the database."""
    logger.warning("Could not connect to database: %s", exc)
    logger.warning("The application will start but database operations will fail until the connection succeeds.")

    try:
        url = make_url(settings.database_url)
    except Exception as parse_error:  # pragma: no cover
        logger.warning("Unable to parse DATABASE_URL (%s); skipping detailed diagnostics.", parse_error)
        return

    logger.warning(
        "Database connection settings: dialect=%s driver=%s host=%s port=%s database=%s username=%s",
        url.get_backend_name(),
        url.get_driver_name() or "default",
        url.host or "localhost",
        url.port or "(default)",
        url.database,
        url.username,
    )

    if url.get_backend_name() == "sqlite":
        return

    host = url.host or "localhost"
    port = url.port or 5432

    try:
        with closing(socket.create_connection((host, port), timeout=2)):
            logger.warning("Socket check: able to reach %s:%s", host, port)
    except OSError as socket_err:
        logger.warning("Socket check: unable to reach %s:%s (%s)", host, port, socket_err)


def get_engine():
    global _engine
    if _engine is None:
        try:
            _engine = create_engine(settings.database_url)
            # Test connection eagerly so failures surface immediately.
            with _engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            _report_connection_failure(e)
            # Create the engine anyway so callers can proceed (may still fail later).
            _engine = create_engine(settings.database_url)
    return _engine


# Don't create engine at import time
SessionLocal = None

Base = declarative_base()


def get_session_local():
    global SessionLocal
    if SessionLocal is None:
        engine = get_engine()
        SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return SessionLocal


def get_db():
    SessionLocal = get_session_local()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_database(engine=None) -> None:
    """Create every catalog, geography and user table that does not exist yet."""
    # Table declarations register themselves on Base.metadata at import time.
    from backoffice.core import security  # noqa: F401
    from backoffice.db import catalog_tables, models  # noqa: F401

    engine = engine or get_engine()
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ready (%d tables)", len(Base.metadata.tables))
