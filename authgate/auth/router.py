"""
Router de autenticação com endpoints de login e registro.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.auth.config import get_auth_config
from authgate.auth.dependencies import RequiredUser
from authgate.auth.schemas import (
    LoginRequest,
    LoginResult,
    MessageResponse,
    RegistrationData,
    RegistrationResult,
    UserResponse,
)
from authgate.auth.service import get_auth_service
from authgate.dependencies import get_db_session

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/auth",
    tags=["authentication"],
    responses={
        401: {"description": "Não autenticado"},
    }
)


@router.post(
    "/login",
    response_model=LoginResult,
    summary="Fazer login",
    description="Autentica usuário e retorna token JWT"
)
async def login(
    login_data: LoginRequest,
    session: AsyncSession = Depends(get_db_session)
):
    """
    Autentica usuário e retorna token de acesso.

    - **username**: Nome de usuário
    - **password**: Senha

    Falhas retornam 401 com o mesmo formato de resposta (``success: false``).
    """
    auth_service = get_auth_service(session)

    result = await auth_service.login(login_data.username, login_data.password)

    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=result.model_dump(exclude_none=True),
            headers={"WWW-Authenticate": "Bearer"}
        )

    return result


@router.post(
    "/register",
    response_model=RegistrationResult,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
    summary="Registrar novo usuário",
    description="Cria uma nova conta de usuário"
)
async def register(
    user_data: RegistrationData,
    session: AsyncSession = Depends(get_db_session)
) -> RegistrationResult:
    """
    Registra um novo usuário.

    - **username**: Nome de usuário único (3-50 caracteres)
    - **password**: Senha (mín. 8 caracteres)
    - **details**: Dados de perfil (opcional)
    - **clientConfig**: Configuração do cliente (opcional)

    Username duplicado resulta em 409.
    """
    if not get_auth_config().registration_enabled:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Registro de novos usuários desabilitado"
        )

    auth_service = get_auth_service(session)
    result = await auth_service.register(user_data)

    logger.info(f"Novo usuário registrado: {user_data.username}")
    return result


@router.get(
    "/me",
    response_model=UserResponse,
    response_model_by_alias=True,
    summary="Dados do usuário atual",
    description="Retorna informações do usuário autenticado"
)
async def get_current_user_info(current_user: RequiredUser) -> UserResponse:
    """Requer token JWT válido no header Authorization."""
    return UserResponse.model_validate(current_user)


@router.get(
    "/verify",
    response_model=MessageResponse,
    summary="Verificar token",
    description="Verifica se o token JWT é válido"
)
async def verify_token(current_user: RequiredUser) -> MessageResponse:
    return MessageResponse(
        message=f"Token válido para usuário: {current_user.username}",
        success=True
    )
