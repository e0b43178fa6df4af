import logging
from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.config import Settings, get_settings
from authgate.core.database import get_session_factory
from authgate.core.exceptions import DatabaseError

logger = logging.getLogger(__name__)


def get_config() -> Settings:
    """Dependency para obter configurações da aplicação."""
    return get_settings()


async def get_db_session(
    config: Settings = Depends(get_config)
) -> AsyncGenerator[AsyncSession, None]:
    """Dependency para sessões de banco com commit ao final da requisição."""
    session_factory = get_session_factory()

    async with session_factory() as session:
        logger.debug("Sessão de banco de dados criada")

        try:
            yield session
            await session.commit()
            logger.debug("Transação commitada")

        except SQLAlchemyError as e:
            logger.error(f"Erro SQLAlchemy: {e}")
            await session.rollback()
            raise DatabaseError(
                message=f"Erro de banco de dados: {str(e)}",
                details={"error_type": type(e).__name__}
            ) from e

        except Exception:
            await session.rollback()
            raise
