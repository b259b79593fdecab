from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context
import os
import sys

# Add project root to sys.path so 'delivery_api' package is importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Load .env for DATABASE_SYNC_URL / DATABASE_URL
from dotenv import load_dotenv
load_dotenv()

# Import all models so Base.metadata is populated
import delivery_api.models  # noqa: F401
from delivery_api.database import Base

config = context.config


def _database_url() -> str:
    """Sync driver URL; falls back to the app's asyncpg URL minus the driver."""
    if os.getenv("DATABASE_SYNC_URL"):
        return os.environ["DATABASE_SYNC_URL"]
    if os.getenv("DATABASE_URL"):
        return os.environ["DATABASE_URL"].replace("+asyncpg", "")
    return config.get_main_option("sqlalchemy.url")


database_url = _database_url()
config.set_main_option("sqlalchemy.url", database_url)
if config.config_file_name:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline():
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online():
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
