"""
Schemas Pydantic para autenticação.
"""
from datetime import datetime
from typing import Annotated, Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RegistrationData(BaseModel):
    """Dados de registro de usuário.

    ``details`` e ``clientConfig`` são payloads opacos guardados como estão.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    username: Annotated[
        str,
        Field(min_length=3, max_length=50, pattern=r"^[a-zA-Z0-9_.-]+$")
    ]
    password: Annotated[
        str,
        Field(min_length=8, max_length=72, description="Senha deve ter no mínimo 8 caracteres")
    ]
    details: Dict[str, Any] = Field(default_factory=dict)
    client_config: Dict[str, Any] = Field(default_factory=dict, alias="clientConfig")

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Senha não pode ser apenas espaços")
        # bcrypt ignora tudo além de 72 bytes
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Senha não pode exceder 72 bytes em UTF-8")
        return v


class LoginRequest(BaseModel):
    """Schema para requisição de login."""
    username: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=1, max_length=100)


class TokenPayload(BaseModel):
    """Conteúdo assinado dentro do token."""
    id: str
    username: str


class UserResponse(BaseModel):
    """Schema de resposta para usuário (nunca inclui o hash)."""
    id: str
    username: str
    details: Dict[str, Any] = Field(default_factory=dict)
    client_config: Dict[str, Any] = Field(default_factory=dict, serialization_alias="clientConfig")
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class LoginResult(BaseModel):
    """Resultado de uma tentativa de login."""
    success: bool
    message: str
    token: Optional[str] = None


class RegistrationResult(BaseModel):
    """Resultado de um registro."""
    success: bool
    message: str
    user: Optional[UserResponse] = None


class MessageResponse(BaseModel):
    """Schema genérico para mensagens."""
    message: str
    success: bool = True
