"""
Módulo de autenticação JWT do AuthGate.

Implementa:
- Registro e login de usuários
- Tokens JWT para autenticação
- Proteção de endpoints via estratégia plugável
"""
from authgate.auth.config import AuthConfig, get_auth_config
from authgate.auth.dependencies import RequiredUser, jwt_middleware, require_user
from authgate.auth.router import router as auth_router
from authgate.auth.service import AuthenticationService, get_auth_service
from authgate.auth.strategy import JWTStrategy, install_strategy

__all__ = [
    "AuthConfig",
    "get_auth_config",
    "AuthenticationService",
    "get_auth_service",
    "JWTStrategy",
    "install_strategy",
    "require_user",
    "jwt_middleware",
    "RequiredUser",
    "auth_router",
]
