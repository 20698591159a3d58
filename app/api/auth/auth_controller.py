# app/api/auth/auth_controller.py

from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.auth.auth_repo import AuthRepository
from app.api.auth.schema_auth import CadastroClienteRequest, LoginRequest, TokenResponse
from app.api.cadastros.models.user_model import UserModel
from app.api.cadastros.schemas.schema_usuario import UserCreate, UserResponse
from app.api.cadastros.services.usuario_service import UserService
from app.core.admin_dependencies import get_current_user
from app.core.security import verify_password, create_access_token, ACCESS_TOKEN_EXPIRE_MINUTES
from app.database.db_connection import get_db
from app.utils.logger import logger
from app.utils.validadores import MSG_SENHA_FRACA, senha_forte

router = APIRouter(tags=["auth"], prefix="/api/auth")


def _emitir_token(user: UserModel) -> TokenResponse:
    access_token = create_access_token(
        data={"sub": str(user.id), "role": user.role},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    return TokenResponse(
        role=user.role,
        access_token=access_token,
        token_type="Bearer",
    )


@router.post("/token", response_model=TokenResponse)
def login_usuario(
    payload: LoginRequest,
    db: Session = Depends(get_db),
):
    user = AuthRepository(db).get_user_by_email(payload.email)
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenciais inválidas",
            headers={"WWW-Authenticate": "Bearer"}
        )
    return _emitir_token(user)


@router.post("/cadastro", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def cadastrar_cliente(
    payload: CadastroClienteRequest,
    db: Session = Depends(get_db),
):
    """Cadastro de cliente final (área 'Minhas análises')."""
    nome = payload.nome.strip()
    if len(nome) < 2:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Nome deve ter no mínimo 2 caracteres")
    if not senha_forte(payload.password):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, MSG_SENHA_FRACA)

    user = UserService(db).create_user(
        UserCreate(email=payload.email, password=payload.password, nome=nome, whatsapp=payload.whatsapp)
    )
    db.commit()
    logger.info(f"[Auth] Cliente cadastrado user_id={user.id}")
    return _emitir_token(user)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Retorna o usuário atual baseado no token JWT"
)
def obter_usuario_atual(
    current_user: UserModel = Depends(get_current_user),
):
    return current_user
