# app/api/cadastros/repositories/usuarios_repo.py
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.api.cadastros.models.user_model import UserModel


class UsuarioRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, id: int) -> UserModel | None:
        return self.db.get(UserModel, id)

    def get_by_email(self, email: str) -> UserModel | None:
        return (
            self.db.query(UserModel)
            .filter(func.lower(UserModel.email) == email.strip().lower())
            .first()
        )

    def create(self, user: UserModel) -> UserModel:
        """Adiciona sem commit: quem chama controla a transação."""
        self.db.add(user)
        self.db.flush()
        return user

    def update_password(self, user: UserModel, hashed_password: str) -> UserModel:
        user.hashed_password = hashed_password
        self.db.flush()
        return user
