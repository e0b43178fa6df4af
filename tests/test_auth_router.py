import pytest
from fastapi import status

from authgate.auth.config import get_auth_config
from authgate.auth.strategy import install_strategy
from authgate.core.exceptions import DatabaseError
from authgate.main import app


async def _register(client, payload):
    return await client.post("/api/v1/auth/register", json=payload)


async def _login(client, username, password):
    return await client.post(
        "/api/v1/auth/login",
        json={"username": username, "password": password}
    )


class TestRegisterEndpoint:
    """Testes para o endpoint de registro."""

    @pytest.mark.asyncio
    async def test_register_created(self, test_client, registration_payload):
        response = await _register(test_client, registration_payload)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()

        assert data["success"] is True
        assert data["message"] == "Registration completed."
        assert data["user"]["username"] == "maria"
        assert data["user"]["clientConfig"] == {"theme": "dark", "language": "pt-BR"}
        assert "password" not in data["user"]

    @pytest.mark.asyncio
    async def test_register_duplicate_conflict(self, test_client, registration_payload):
        await _register(test_client, registration_payload)

        response = await _register(test_client, registration_payload)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"] == "DuplicateRecordError"

    @pytest.mark.asyncio
    async def test_register_missing_password(self, test_client):
        response = await _register(test_client, {"username": "maria"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    async def test_register_disabled(self, test_client, registration_payload, monkeypatch):
        monkeypatch.setenv("AUTHGATE_REGISTRATION_ENABLED", "false")
        get_auth_config.cache_clear()

        response = await _register(test_client, registration_payload)

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestLoginEndpoint:
    """Testes para o endpoint de login."""

    @pytest.mark.asyncio
    async def test_login_success(self, test_client, registration_payload):
        await _register(test_client, registration_payload)

        response = await _login(test_client, "maria", registration_payload["password"])

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["success"] is True
        assert data["token"]

    @pytest.mark.asyncio
    async def test_login_unknown_user(self, test_client):
        response = await _login(test_client, "ninguem", "qualquer-senha")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        data = response.json()
        assert data == {"success": False, "message": "No such user."}

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, test_client, registration_payload):
        await _register(test_client, registration_payload)

        response = await _login(test_client, "maria", "senha-errada")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        data = response.json()
        assert data["message"] == "Password did not match."
        assert "token" not in data


class TestProtectedRoutes:
    """Testes para o middleware JWT."""

    @pytest.mark.asyncio
    async def test_me_with_valid_token(self, test_client, registration_payload):
        await _register(test_client, registration_payload)
        login = await _login(test_client, "maria", registration_payload["password"])
        token = login.json()["token"]

        response = await test_client.get(
            "/api/v1/auth/me",
            headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["username"] == "maria"
        assert data["details"] == registration_payload["details"]
        assert "password" not in data

    @pytest.mark.asyncio
    async def test_me_without_token(self, test_client):
        response = await test_client.get("/api/v1/auth/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_me_with_invalid_token(self, test_client):
        response = await test_client.get(
            "/api/v1/auth/me",
            headers={"Authorization": "Bearer nao-e-um-token"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_me_with_non_bearer_scheme(self, test_client):
        response = await test_client.get(
            "/api/v1/auth/me",
            headers={"Authorization": "Basic bWFyaWE6c2VuaGE="}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_token_for_missing_user(self, test_client, signer):
        """Token válido de usuário inexistente recebe o mesmo 401."""
        token = signer.sign({"id": "usuario-removido", "username": "fantasma"})

        response = await test_client.get(
            "/api/v1/auth/verify",
            headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_installed_strategy_is_used(self, test_client):
        class StaticUser:
            id = "fixo"
            username = "convidado"

        class AllowAllStrategy:
            def verify(self, token):
                return {"id": "fixo"}

            async def resolve(self, payload, session):
                return StaticUser()

        install_strategy(app, AllowAllStrategy())

        response = await test_client.get(
            "/api/v1/auth/verify",
            headers={"Authorization": "Bearer qualquer"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"] == "Token válido para usuário: convidado"

    @pytest.mark.asyncio
    async def test_lookup_failure_is_not_unauthorized(self, test_client):
        """Erro ao buscar o usuário chega como erro, não como 401."""
        class BrokenStoreStrategy:
            def verify(self, token):
                return {"id": "fixo"}

            async def resolve(self, payload, session):
                raise DatabaseError("Banco indisponível")

        install_strategy(app, BrokenStoreStrategy())

        response = await test_client.get(
            "/api/v1/auth/verify",
            headers={"Authorization": "Bearer qualquer"}
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["error"] == "DatabaseError"
        assert "WWW-Authenticate" not in response.headers


class TestServiceEndpoints:

    @pytest.mark.asyncio
    async def test_root(self, test_client):
        response = await test_client.get("/")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "running"

    @pytest.mark.asyncio
    async def test_health(self, test_client, test_engine, monkeypatch):
        monkeypatch.setattr("authgate.core.database.get_engine", lambda: test_engine)

        response = await test_client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["components"]["database"] == "healthy"
