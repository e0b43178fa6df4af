"""
Serviço de autenticação: login e registro.
"""
import logging
from typing import Any, Mapping, Union

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from authgate.auth.config import AuthConfig, get_auth_config
from authgate.auth.repository import UserRepository
from authgate.auth.schemas import (
    LoginResult,
    RegistrationData,
    RegistrationResult,
    TokenPayload,
    UserResponse,
)
from authgate.auth.security import PasswordHasher, TokenSigner
from authgate.core.protocols import UserStoreProtocol

logger = logging.getLogger(__name__)

NO_SUCH_USER = "No such user."
PASSWORD_MISMATCH = "Password did not match."
LOGIN_SUCCEEDED = "User logged in."
REGISTRATION_COMPLETED = "Registration completed."


class AuthenticationService:
    """Orquestra login (credenciais -> token) e registro (hash -> persistência)."""

    def __init__(
        self,
        users: UserStoreProtocol,
        hasher: PasswordHasher,
        signer: TokenSigner
    ):
        self.users = users
        self.hasher = hasher
        self.signer = signer

    async def login(self, username: str, password: str) -> LoginResult:
        """Login de usuário por nome e senha.

        Falhas esperadas (usuário inexistente, senha errada) voltam como
        resultado estruturado, nunca como exceção.
        """
        logger.info("User is trying to login.")

        user = await self.users.get_by_username(username, with_password=True)
        if not user:
            logger.info("Login failed. No such user.")
            return LoginResult(success=False, message=NO_SUCH_USER)

        if not await run_in_threadpool(self.hasher.verify, password, user.password):
            logger.info("Login failed. Wrong password.")
            return LoginResult(success=False, message=PASSWORD_MISMATCH)

        payload = TokenPayload(id=user.id, username=user.username)
        token = self.signer.sign(payload.model_dump())

        logger.info("User logged in.")
        return LoginResult(success=True, message=LOGIN_SUCCEEDED, token=token)

    async def register(
        self,
        user_data: Union[RegistrationData, Mapping[str, Any]]
    ) -> RegistrationResult:
        """Registra novo usuário.

        Entrada inválida levanta ``pydantic.ValidationError``. Erros de
        persistência são logados e propagados para quem chamou.
        """
        if not isinstance(user_data, RegistrationData):
            user_data = RegistrationData.model_validate(user_data)

        logger.debug(f"Registering user {user_data.username}.")

        hashed_password = await run_in_threadpool(self.hasher.hash, user_data.password)

        try:
            user = await self.users.create(
                username=user_data.username,
                password=hashed_password,
                details=user_data.details,
                client_config=user_data.client_config
            )
        except Exception as e:
            logger.error(f"Could not register user: {e}.")
            raise

        return RegistrationResult(
            success=True,
            message=REGISTRATION_COMPLETED,
            user=UserResponse.model_validate(user)
        )


def get_auth_service(session: AsyncSession, config: AuthConfig = None) -> AuthenticationService:
    """Factory para criar instância do AuthenticationService."""
    config = config or get_auth_config()

    return AuthenticationService(
        users=UserRepository(session),
        hasher=PasswordHasher(rounds=config.bcrypt_rounds),
        signer=TokenSigner.from_config(config)
    )
