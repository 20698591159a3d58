# app/api/cadastros/services/usuario_service.py
from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.api.cadastros.models.user_model import UserModel
from app.api.cadastros.repositories.usuarios_repo import UsuarioRepository
from app.api.cadastros.schemas.schema_usuario import UserCreate
from app.core.security import hash_password
from app.utils.validadores import email_valido


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UsuarioRepository(db)

    def create_user(self, data: UserCreate, role: str = "user") -> UserModel:
        """
        Cria o usuário dentro da transação corrente (flush, sem commit).
        Os cadastros de parceiro/master chamam isto antes de gravar o próprio registro.
        """
        email = (data.email or "").strip().lower()
        if not email_valido(email):
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "E-mail inválido")
        if self.repo.get_by_email(email):
            raise HTTPException(status.HTTP_409_CONFLICT, "Este e-mail já está cadastrado")

        user = UserModel(
            email=email,
            hashed_password=hash_password(data.password),
            nome=(data.nome or "").strip() or None,
            whatsapp=data.whatsapp,
            role=role,
        )
        return self.repo.create(user)

