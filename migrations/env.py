"""
Alembic environment for the ATM schema.

The database URL comes from atm_system settings (DATABASE_URL
or .env), never from alembic.ini.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from atm_system.config import get_settings
from atm_system.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# users, accounts, customer_accounts, transactions
target_metadata = Base.metadata

database_url = get_settings().DATABASE_URL
config.set_main_option("sqlalchemy.url", database_url)

# SQLite can only ALTER through table copies
use_batch = database_url.startswith("sqlite")


def run_migrations_offline() -> None:
    """Emit the migration SQL without a live connection."""
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=use_batch,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations over a NullPool connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=use_batch,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
