"""
Database engine, session factory, and base model.

Nothing is created at import time. The engine is built from an
explicit Settings object, and the resulting session factory is
handed to the repository. Every model inherits from Base.
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from atm_system.config import Settings


# --- Base Model Class ---
# Every database model (Account, User, Transaction, ...)
# inherits from this class. SQLAlchemy uses it to track
# all models and generate the correct SQL for table creation.
class Base(DeclarativeBase):
    pass


def make_engine(settings: Settings) -> Engine:
    """
    Build the engine for the configured database.

    pool_pre_ping=True tests connections before using them,
    which handles a database restart or a stale connection.
    """
    connect_args = {}
    if settings.DATABASE_URL.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    return create_engine(
        settings.DATABASE_URL,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def make_session_factory(settings: Settings | None = None, engine: Engine | None = None):
    """
    Return a session factory bound to the configured database.

    autoflush=False means SQL is only sent when we flush or
    commit, so each repository operation controls exactly
    when its statements run.
    """
    if engine is None:
        if settings is None:
            raise ValueError("either settings or engine is required")
        engine = make_engine(settings)

    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
    )


def create_schema(engine: Engine) -> None:
    """Create all tables. Used by `init-db` and the test suite."""
    # Importing the package registers every model on Base.metadata
    import atm_system.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
