from logging.config import fileConfig
from sqlalchemy import pool
from alembic import context
from videohub.config import get_settings
from videohub.database import Base, Database
from videohub.models import User, Video  # noqa: F401 - load models

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

database_url = get_settings().database_url
config.set_main_option("sqlalchemy.url", database_url)
target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL to stdout without a live connection."""
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Migrate through a short-lived handle; NullPool so nothing outlives the run."""
    connectable = context.config.attributes.get("connection", None)
    handle = None
    if connectable is None:
        handle = Database(database_url, poolclass=pool.NullPool)
        connectable = handle.ensure_connected()
    try:
        with connectable.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=target_metadata,
                render_as_batch=connection.dialect.name == "sqlite",
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        if handle is not None:
            handle.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
