"""
Protocolos (interfaces) para tipagem estrutural.

Permite trocar implementações (estratégias de autenticação, stores) e
facilita testes com mocks.
"""
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from sqlalchemy.ext.asyncio import AsyncSession


@runtime_checkable
class AuthStrategy(Protocol):
    """Política de verificação usada pelo middleware de autenticação."""

    def verify(self, token: str) -> Optional[Dict[str, Any]]:
        """Verifica o token e devolve o payload, ou None se inválido."""
        ...

    async def resolve(self, payload: Dict[str, Any], session: AsyncSession) -> Optional[Any]:
        """Resolve o payload para um usuário, ou None se não existir."""
        ...


@runtime_checkable
class UserStoreProtocol(Protocol):
    """Interface para persistência de usuários."""

    async def get_by_id(self, user_id: str) -> Optional[Any]:
        """Busca por ID."""
        ...

    async def get_by_username(self, username: str, with_password: bool = False) -> Optional[Any]:
        """Busca por username."""
        ...

    async def create(
        self,
        username: str,
        password: str,
        details: Optional[Dict[str, Any]] = None,
        client_config: Optional[Dict[str, Any]] = None
    ) -> Any:
        """Cria novo usuário."""
        ...
