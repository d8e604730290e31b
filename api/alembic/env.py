"""
Configuracion de Alembic para migraciones de base de datos.

Este archivo configura Alembic para:
- Usar DATABASE_URL desde settings (config.py)
- Importar los modelos para autogenerate
- Forzar el driver psycopg (psycopg3) para migraciones sincronas
"""
import sys
from pathlib import Path
from logging.config import fileConfig

from sqlalchemy import engine_from_config
from sqlalchemy import pool

from alembic import context

# Agregar el directorio raiz al path para imports
API_DIR = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(API_DIR))

from attendance_sync.core.config import settings
from attendance_sync.infrastructure.database.models import Base


def _migration_url(raw_url: str) -> str:
    """postgresql://, postgres:// o +asyncpg -> postgresql+psycopg://"""
    if raw_url.startswith("postgres://"):
        raw_url = "postgresql://" + raw_url[len("postgres://"):]
    raw_url = raw_url.replace("+asyncpg", "+psycopg")
    if raw_url.startswith("postgresql://"):
        raw_url = raw_url.replace("postgresql://", "postgresql+psycopg://", 1)
    return raw_url


# Alembic Config object
config = context.config

if not settings.DATABASE_URL:
    raise RuntimeError("DATABASE_URL es obligatoria para ejecutar migraciones")
config.set_main_option("sqlalchemy.url", _migration_url(settings.DATABASE_URL))

# Configurar logging desde alembic.ini
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Metadata de los modelos para autogenerate
target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """
    Ejecuta migraciones en modo 'offline'.

    Genera SQL sin conectarse a la base de datos.
    """
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """
    Ejecuta migraciones en modo 'online'.

    Conecta a la base de datos y ejecuta las migraciones directamente.
    """
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
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
