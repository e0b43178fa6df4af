import logging
import traceback
from typing import Any, Callable, Dict, Optional, Union

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AuthGateError(Exception):
    """Exceção base do AuthGate, com código e detalhes serializáveis."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.error_code = self.__class__.__name__

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Detalhes: {self.details})"
        return self.message


class DatabaseError(AuthGateError):
    """Falha de banco de dados sem tratamento específico."""


class DuplicateRecordError(DatabaseError):
    """Violação de unicidade ao criar registro."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, resource: str, field: str, details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        details.update({"resource": resource, "field": field})
        super().__init__(f"{resource} já existe (Campo: {field})", details=details)


# Exception handlers para FastAPI
async def authgate_error_handler(request: Request, exc: AuthGateError) -> JSONResponse:
    """Handler para exceções específicas do AuthGate."""
    logger.error(
        f"Exceção da aplicação: {exc.__class__.__name__}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error": exc.to_dict(),
        }
    )

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler para exceções não tratadas."""
    logger.error(
        f"Exceção não tratada: {exc.__class__.__name__}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error": str(exc),
            "traceback": traceback.format_exc()
        }
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "INTERNAL_SERVER_ERROR",
            "message": "Erro interno do servidor",
            "details": {
                "request_id": getattr(request.state, "request_id", "unknown"),
            }
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Padroniza o corpo de HTTPException no formato de erro da API."""
    logger.warning(
        f"HTTP Exception {exc.status_code}: {exc.detail}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "status_code": exc.status_code
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": f"HTTP_{exc.status_code}",
            "message": str(exc.detail),
            "details": {}
        },
        headers=exc.headers
    )


def get_exception_handlers() -> Dict[Union[int, type], Callable]:
    """Retorna handlers de exceção para FastAPI."""
    return {
        AuthGateError: authgate_error_handler,
        HTTPException: http_exception_handler,
        Exception: general_exception_handler,
    }
