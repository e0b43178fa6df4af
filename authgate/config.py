import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseModel):
    url: str = Field(default="sqlite+aiosqlite:///./data/authgate.db")
    pool_size: int = Field(default=10, ge=1, le=50)
    max_overflow: int = Field(default=20, ge=0, le=100)
    pool_timeout: int = Field(default=30, ge=5, le=300)
    pool_recycle: int = Field(default=3600, ge=300, le=86400)
    echo: bool = Field(default=False)

    @field_validator("url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v:
            raise ValueError("URL do banco de dados não pode estar vazia")
        if v.startswith("sqlite") and ":memory:" not in v:
            db_path = Path(v.split(":///", 1)[-1])
            db_path.parent.mkdir(parents=True, exist_ok=True)
        return v


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1024, le=65535)
    reload: bool = Field(default=False)


class Settings(BaseSettings):
    """Configurações principais da aplicação AuthGate."""

    model_config = SettingsConfigDict(
        env_prefix="AUTHGATE_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    # Configurações da aplicação
    app_name: str = Field(default="AuthGate")
    app_version: str = Field(default="1.0.0")
    app_description: str = Field(default="Serviço de autenticação com tokens JWT")
    debug: bool = Field(default=False)
    environment: Literal["development", "staging", "production"] = Field(default="development")

    # Configurações por domínio
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    # Configurações de logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # CORS
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"]
    )
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: list[str] = Field(default=["GET", "POST", "OPTIONS"])
    cors_allow_headers: list[str] = Field(default=["*"])

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = str(v).upper()
        if level not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            raise ValueError(f"Nível de log inválido: {v}")
        return level

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_database_url(self) -> str:
        return self.database.url


def configure_logging(settings: "Settings") -> None:
    """Aplica nível e formato de log definidos nas configurações."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format=settings.log_format,
    )


@lru_cache()
def get_settings() -> Settings:
    """Factory para obter instância singleton das configurações."""
    settings = Settings()
    configure_logging(settings)
    return settings

