"""
Utilitários de senha e token.

``PasswordHasher`` encapsula o contexto do passlib (bcrypt) e ``TokenSigner``
assina/verifica tokens JWT com a chave compartilhada recebida na construção.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from authgate.auth.config import AuthConfig

logger = logging.getLogger(__name__)


class PasswordHasher:
    """Hash de senha de mão única e comparação."""

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds
        )

    def hash(self, password: str) -> str:
        """Gera hash da senha."""
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """Verifica se a senha corresponde ao hash armazenado."""
        try:
            return self._context.verify(plain_password, hashed_password)
        except (ValueError, TypeError) as e:
            # Hash corrompido ou em formato desconhecido
            logger.warning(f"Hash de senha inválido: {e}")
            return False


class TokenSigner:
    """Assina payloads em tokens bearer e os verifica."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_minutes: Optional[int] = None
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    @classmethod
    def from_config(cls, config: AuthConfig) -> "TokenSigner":
        return cls(
            secret_key=config.jwt_secret_key,
            algorithm=config.jwt_algorithm,
            expire_minutes=config.jwt_access_token_expire_minutes
        )

    def sign(self, payload: Dict[str, Any]) -> str:
        """Cria token JWT a partir do payload."""
        to_encode = dict(payload)

        if self.expire_minutes:
            to_encode["exp"] = datetime.now(timezone.utc) + timedelta(minutes=self.expire_minutes)

        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> Optional[Dict[str, Any]]:
        """Verifica assinatura (e expiração) e devolve o payload, ou None."""
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            logger.debug(f"Erro ao decodificar token: {e}")
            return None
