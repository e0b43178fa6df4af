import logging
from functools import lru_cache
from typing import Any, Dict

from sqlalchemy import MetaData, event, text
from sqlalchemy.exc import DatabaseError, DisconnectionError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from authgate.config import get_settings
from authgate.core.exceptions import DatabaseError as AppDatabaseError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base declarativa para modelos SQLAlchemy 2.0 com suporte a typing."""

    metadata = MetaData(
        naming_convention={
            "ix": "ix_%(column_0_label)s",
            "uq": "uq_%(table_name)s_%(column_0_name)s",
            "ck": "ck_%(table_name)s_%(constraint_name)s",
            "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
            "pk": "pk_%(table_name)s"
        }
    )

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        primary_key = getattr(self, 'id', 'unknown')
        return f"<{class_name}(id={primary_key})>"


def create_database_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Cria e configura engine assíncrono do banco."""
    settings = get_settings()

    try:
        engine_kwargs: Dict[str, Any] = {"echo": echo}

        if database_url.startswith("sqlite"):
            logger.info("Configurando engine SQLite (aiosqlite)")
            engine_kwargs["connect_args"] = {"timeout": 20}

            # Banco em memória só existe na própria conexão
            if ":memory:" in database_url:
                engine_kwargs["poolclass"] = StaticPool

        else:
            logger.info("Configurando engine PostgreSQL")
            engine_kwargs.update({
                "pool_size": settings.database.pool_size,
                "max_overflow": settings.database.max_overflow,
                "pool_timeout": settings.database.pool_timeout,
                "pool_recycle": settings.database.pool_recycle,
                "pool_pre_ping": True,
            })

        engine = create_async_engine(database_url, **engine_kwargs)

        if database_url.startswith("sqlite"):
            @event.listens_for(engine.sync_engine, "connect")
            def receive_connect(dbapi_connection, connection_record):
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        logger.info(f"Engine de banco criado: {engine.url.render_as_string(hide_password=True)}")
        return engine

    except Exception as e:
        logger.error(f"Erro ao criar engine: {e}")
        raise AppDatabaseError(
            message=f"Falha ao criar engine: {str(e)}",
            details={"error": str(e)}
        ) from e


@lru_cache()
def get_engine() -> AsyncEngine:
    """Factory singleton para engine de banco."""
    settings = get_settings()
    return create_database_engine(settings.get_database_url(), echo=settings.database.echo)


def get_session_factory(engine: AsyncEngine = None) -> async_sessionmaker[AsyncSession]:
    """Factory para criar sessionmaker assíncrono configurado."""
    return async_sessionmaker(
        bind=engine or get_engine(),
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


async def ping_database(engine: AsyncEngine = None) -> bool:
    """Testa conectividade com banco executando query simples."""
    engine = engine or get_engine()

    try:
        async with engine.connect() as connection:
            result = await connection.execute(text("SELECT 1 as test_value"))
            test_value = result.scalar()

    except (OperationalError, DatabaseError, DisconnectionError) as e:
        logger.error(f"Erro de conectividade: {e}")
        raise AppDatabaseError(
            message=f"Falha na conexão: {str(e)}",
            details={"error_type": type(e).__name__}
        ) from e

    if test_value != 1:
        raise AppDatabaseError(
            message="Teste falhou: resultado inesperado",
            details={"expected": 1, "received": test_value}
        )

    logger.info("Teste de conexão bem-sucedido")
    return True


async def init_database(engine: AsyncEngine = None) -> None:
    """Inicializa banco criando todas as tabelas."""
    # Registra os modelos no metadata antes do create_all
    from authgate.auth import models  # noqa: F401

    engine = engine or get_engine()

    try:
        logger.info("Inicializando banco de dados...")
        async with engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)
        logger.info("Banco inicializado com sucesso")

    except SQLAlchemyError as e:
        logger.error(f"Erro ao inicializar banco: {e}")
        raise AppDatabaseError(
            message=f"Falha na inicialização: {str(e)}",
            details={"error": str(e)}
        ) from e

    await ping_database(engine)


async def check_database_health(engine: AsyncEngine = None) -> Dict[str, Any]:
    """Executa verificação de saúde do banco."""
    engine = engine or get_engine()

    try:
        connection_ok = await ping_database(engine)
        return {
            "status": "healthy" if connection_ok else "unhealthy",
            "connection_test": connection_ok,
            "dialect": engine.dialect.name,
            "driver": engine.dialect.driver,
            "tables": list(Base.metadata.tables.keys()),
        }

    except AppDatabaseError as e:
        logger.error(f"Erro no health check: {e}")
        return {
            "status": "unhealthy",
            "error": e.message,
            "error_type": type(e).__name__,
        }
