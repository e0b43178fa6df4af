"""
Middleware JWT como dependency do FastAPI.

Uso por rota::

    @router.get("/seguro", dependencies=[jwt_middleware])
    async def seguro(request: Request): ...

ou recebendo o usuário diretamente com ``RequiredUser``.
"""
import logging
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.auth.models import User
from authgate.auth.strategy import get_default_strategy
from authgate.core.protocols import AuthStrategy
from authgate.dependencies import get_db_session

logger = logging.getLogger(__name__)

# Security scheme
security = HTTPBearer(auto_error=False)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"}
    )


def get_strategy(request: Request) -> AuthStrategy:
    """Estratégia instalada na aplicação, ou a estratégia JWT padrão."""
    strategy = getattr(request.app.state, "auth_strategy", None)
    if strategy is None:
        strategy = get_default_strategy()
        request.app.state.auth_strategy = strategy
    return strategy


async def require_user(
    request: Request,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    strategy: AuthStrategy = Depends(get_strategy),
    session: AsyncSession = Depends(get_db_session)
) -> User:
    """
    Autentica a requisição pelo token bearer, sem sessão.

    Token ausente, inválido, expirado ou de usuário inexistente resultam no
    mesmo 401. O usuário resolvido fica em ``request.state.user``.
    """
    if not credentials:
        logger.debug("Requisição sem token bearer")
        raise _unauthorized()

    payload = strategy.verify(credentials.credentials)
    if not payload:
        raise _unauthorized()

    user = await strategy.resolve(payload, session)
    if not user:
        raise _unauthorized()

    request.state.user = user
    return user


jwt_middleware = Depends(require_user)

RequiredUser = Annotated[User, Depends(require_user)]
