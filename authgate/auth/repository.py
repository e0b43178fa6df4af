"""
Repository para persistência de usuários.
"""
import logging
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import undefer

from authgate.auth.models import User
from authgate.core.exceptions import DatabaseError, DuplicateRecordError

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository para operações de usuário."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: str) -> Optional[User]:
        """Busca usuário por ID (sem o hash da senha)."""
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str, with_password: bool = False) -> Optional[User]:
        """Busca usuário pelo username exato."""
        query = select(User).where(User.username == username)
        if with_password:
            query = query.options(undefer(User.password))

        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def create(
        self,
        username: str,
        password: str,
        details: Optional[Dict[str, Any]] = None,
        client_config: Optional[Dict[str, Any]] = None
    ) -> User:
        """Persiste novo usuário; ``password`` já deve estar em hash."""
        user = User(
            username=username,
            password=password,
            details=details or {},
            client_config=client_config or {}
        )

        try:
            self.session.add(user)
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateRecordError(
                resource="Usuário",
                field="username",
                details={"username": username}
            ) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(
                message=f"Falha ao criar usuário: {e}",
                details={"error_type": type(e).__name__}
            ) from e

        logger.debug(f"Usuário persistido: {user.id}")
        return user
