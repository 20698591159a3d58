# app/core/admin_dependencies.py

from typing import Optional

from fastapi import Depends, HTTPException, status, Request
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.api.cadastros.models.user_model import UserModel
from app.api.auth.auth_repo import AuthRepository
from app.core.security import SECRET_KEY, ALGORITHM
from app.database.db_connection import get_db
from app.utils.logger import logger

credentials_exception = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Não autenticado",
    headers={"WWW-Authenticate": "Bearer"},
)

forbidden_exception = HTTPException(
    status_code=status.HTTP_403_FORBIDDEN,
    detail="Você não tem permissão para acessar este recurso",
)


def _extrair_bearer(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.replace("Bearer ", "", 1).strip() or None


def _user_id_do_token(access_token: str) -> int:
    try:
        payload = jwt.decode(
            access_token,
            SECRET_KEY,
            algorithms=[ALGORITHM],
            options={"verify_sub": False},
        )
        raw_sub = payload.get("sub")
        if raw_sub is None:
            raise credentials_exception
        return int(raw_sub)
    except (JWTError, ValueError) as e:
        logger.warning(f"[AUTH] Token inválido: {e}")
        raise credentials_exception


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
) -> UserModel:
    """
    Recupera o usuário autenticado a partir do header Authorization (Bearer <token>).
    """
    access_token = _extrair_bearer(request)
    if not access_token:
        logger.warning("[AUTH] Cabeçalho Authorization ausente ou malformado.")
        raise credentials_exception

    user = AuthRepository(db).get_user_by_id(_user_id_do_token(access_token))
    if not user:
        raise credentials_exception

    return user


def get_optional_user(
    request: Request,
    db: Session = Depends(get_db),
) -> Optional[UserModel]:
    """Como get_current_user, mas rotas públicas seguem anônimas sem token."""
    access_token = _extrair_bearer(request)
    if not access_token:
        return None
    try:
        user_id = _user_id_do_token(access_token)
    except HTTPException:
        # token vencido ou inválido: segue como anônimo
        return None
    return AuthRepository(db).get_user_by_id(user_id)


def require_role(allowed_roles: list[str]):
    """
    Dependency factory para restringir acesso por papel.
    Exemplo de uso em rota:

        @router.get(..., dependencies=[Depends(require_role(['master_partner']))])
        def rota_somente_master(...):
            ...
    """

    def dependency(current_user: UserModel = Depends(get_current_user)) -> UserModel:
        if current_user.role not in allowed_roles:
            logger.warning(
                "[AUTH] Acesso negado. role=%s, permitido=%s",
                current_user.role,
                allowed_roles,
            )
            raise forbidden_exception
        return current_user

    return dependency


def require_admin(current_user: UserModel = Depends(get_current_user)) -> UserModel:
    """
    Atalho para rotas que só podem ser acessadas por usuários role='admin'.
    """
    if current_user.role != "admin":
        logger.warning(
            "[AUTH] Acesso negado. role=%s tentou acessar rota admin.",
            current_user.role,
        )
        raise forbidden_exception
    return current_user
