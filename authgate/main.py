import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, status
from fastapi.responses import JSONResponse

from authgate.auth.router import router as auth_router
from authgate.auth.strategy import get_default_strategy, install_strategy
from authgate.config import get_settings
from authgate.core.database import check_database_health, get_engine, init_database
from authgate.core.exceptions import get_exception_handlers
from authgate.shared.middleware import setup_middleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Gerencia ciclo de vida da aplicação."""
    settings = get_settings()

    # STARTUP
    logger.info(f"Iniciando AuthGate v{settings.app_version} - {settings.environment}")

    await init_database()

    if getattr(app.state, "auth_strategy", None) is None:
        install_strategy(app, get_default_strategy())

    logger.info("AuthGate iniciado com sucesso")

    yield

    # SHUTDOWN
    logger.info("Encerrando AuthGate...")
    await get_engine().dispose()
    logger.info("AuthGate encerrado")


def create_app() -> FastAPI:
    """Cria a aplicação FastAPI com middlewares, handlers e routers."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=settings.app_description,
        lifespan=lifespan,
        debug=settings.debug,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        openapi_tags=[
            {
                "name": "authentication",
                "description": "Login, registro e verificação de tokens JWT"
            },
            {
                "name": "health",
                "description": "Verificações de saúde e status"
            }
        ]
    )

    setup_middleware(app)

    for exception_type, handler in get_exception_handlers().items():
        app.add_exception_handler(exception_type, handler)

    app.include_router(auth_router)

    @app.get("/", summary="Página inicial", tags=["health"])
    async def root():
        """Endpoint raiz com informações da API."""
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "description": settings.app_description,
            "environment": settings.environment,
            "status": "running",
        }

    @app.get("/health", summary="Health check", tags=["health"])
    async def health_check():
        """Verifica conectividade com o banco de dados."""
        db_health = await check_database_health()
        overall_status = db_health.get("status", "unhealthy")

        return JSONResponse(
            status_code=status.HTTP_200_OK if overall_status == "healthy" else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": overall_status,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "components": {"database": overall_status},
                "version": settings.app_version,
                "environment": settings.environment
            }
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "authgate.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.server.reload and settings.debug,
        log_level=settings.log_level.lower(),
        access_log=settings.debug
    )
