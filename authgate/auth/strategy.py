"""
Estratégia JWT: token bearer -> payload -> usuário.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.auth.config import get_auth_config
from authgate.auth.models import User
from authgate.auth.repository import UserRepository
from authgate.auth.security import TokenSigner
from authgate.core.protocols import AuthStrategy

logger = logging.getLogger(__name__)


class JWTStrategy:
    """Resolve tokens assinados com a chave compartilhada para usuários pelo ``id``."""

    def __init__(self, signer: TokenSigner):
        self.signer = signer

    def verify(self, token: str) -> Optional[Dict[str, Any]]:
        return self.signer.decode(token)

    async def resolve(self, payload: Dict[str, Any], session: AsyncSession) -> Optional[User]:
        user_id = payload.get("id")
        if user_id is None:
            logger.debug("Token sem claim 'id'")
            return None

        user = await UserRepository(session).get_by_id(str(user_id))
        if not user:
            logger.debug(f"Usuário do token não encontrado: {user_id}")
            return None

        return user


def get_default_strategy() -> JWTStrategy:
    """Estratégia padrão construída a partir da configuração de autenticação."""
    return JWTStrategy(TokenSigner.from_config(get_auth_config()))


def install_strategy(app: FastAPI, strategy: AuthStrategy) -> None:
    """Registra a estratégia usada pelo middleware JWT desta aplicação."""
    if not isinstance(strategy, AuthStrategy):
        raise TypeError(f"Estratégia inválida: {type(strategy).__name__}")

    app.state.auth_strategy = strategy
    logger.info(f"Estratégia de autenticação instalada: {type(strategy).__name__}")
