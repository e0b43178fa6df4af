import os

# Configurações de teste antes de importar a aplicação
TEST_ENV = {
    "AUTHGATE_ENVIRONMENT": "development",
    "AUTHGATE_DATABASE__URL": "sqlite+aiosqlite:///:memory:",
    "AUTHGATE_LOG_LEVEL": "WARNING",
    "AUTHGATE_JWT_SECRET_KEY": "test-secret-key-for-testing-only-0123456789",
    "AUTHGATE_BCRYPT_ROUNDS": "4",
}
os.environ.update(TEST_ENV)

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from authgate.auth.config import get_auth_config  # noqa: E402
from authgate.auth.repository import UserRepository  # noqa: E402
from authgate.auth.security import PasswordHasher, TokenSigner  # noqa: E402
from authgate.auth.service import AuthenticationService  # noqa: E402
from authgate.config import get_settings  # noqa: E402
from authgate.core.database import create_database_engine, get_session_factory, init_database  # noqa: E402
from authgate.dependencies import get_db_session  # noqa: E402
from authgate.main import app  # noqa: E402


# CONFIGURAÇÕES DE TESTE

@pytest.fixture
def auth_config():
    """Configuração de autenticação com bcrypt rápido."""
    return get_auth_config()


@pytest.fixture
def hasher(auth_config):
    return PasswordHasher(rounds=auth_config.bcrypt_rounds)


@pytest.fixture
def signer(auth_config):
    return TokenSigner.from_config(auth_config)


# FIXTURES DE BANCO DE DADOS

@pytest_asyncio.fixture
async def test_engine():
    """Engine SQLite in-memory isolado para cada teste."""
    engine = create_database_engine("sqlite+aiosqlite:///:memory:")
    await init_database(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return get_session_factory(test_engine)


@pytest_asyncio.fixture
async def test_db(session_factory):
    """Sessão de banco para testes de serviço."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def auth_service(test_db, hasher, signer):
    return AuthenticationService(
        users=UserRepository(test_db),
        hasher=hasher,
        signer=signer
    )


# DADOS DE TESTE

@pytest.fixture
def registration_payload():
    return {
        "username": "maria",
        "password": "S3nhaForte!",
        "details": {"fullName": "Maria Silva", "role": "manager"},
        "clientConfig": {"theme": "dark", "language": "pt-BR"},
    }


@pytest_asyncio.fixture
async def registered_user(auth_service, test_db, registration_payload):
    """Usuário registrado e commitado."""
    result = await auth_service.register(registration_payload)
    await test_db.commit()
    return result.user


# CLIENTE DE TESTE

@pytest_asyncio.fixture
async def test_client(session_factory):
    """Cliente HTTP assíncrono com sessão de banco de teste."""
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def cleanup():
    """Cleanup automático entre testes."""
    yield
    app.dependency_overrides.clear()
    app.state.auth_strategy = None
    get_auth_config.cache_clear()
    get_settings.cache_clear()
