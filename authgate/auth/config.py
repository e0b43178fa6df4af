"""
Configuração de autenticação JWT.
"""
import logging
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_SECRET_KEY = "your-super-secret-key-change-in-production-immediately"


class AuthConfig(BaseSettings):
    """Configurações de autenticação JWT."""

    model_config = SettingsConfigDict(
        env_prefix="AUTHGATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # JWT Settings
    jwt_secret_key: str = Field(
        default=DEFAULT_SECRET_KEY,
        min_length=1,
        description="Chave secreta compartilhada para assinar tokens JWT"
    )
    jwt_algorithm: Literal["HS256", "HS384", "HS512"] = Field(
        default="HS256",
        description="Algoritmo de assinatura JWT"
    )
    jwt_access_token_expire_minutes: Optional[int] = Field(
        default=None,
        ge=1,
        le=1440,  # Máximo 24 horas
        description="Expiração do token em minutos (None = sem claim 'exp')"
    )

    # Bcrypt Settings
    bcrypt_rounds: int = Field(
        default=12,
        ge=4,
        le=16,
        description="Número de rounds para hashing de senha"
    )

    # Feature Flags
    registration_enabled: bool = Field(
        default=True,
        description="Se registro de novos usuários está habilitado"
    )


@lru_cache()
def get_auth_config() -> AuthConfig:
    """Factory singleton para configuração de autenticação."""
    config = AuthConfig()

    if config.jwt_secret_key == DEFAULT_SECRET_KEY or len(config.jwt_secret_key) < 32:
        logger.warning(
            "JWT secret não configurada ou muito curta! "
            "Configure AUTHGATE_JWT_SECRET_KEY em .env para produção."
        )

    return config
