# app/api/auth/auth_repo.py
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.api.cadastros.models.user_model import UserModel


class AuthRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_user_by_email(self, email: str) -> UserModel | None:
        return (
            self.db.query(UserModel)
            .filter(func.lower(UserModel.email) == email.strip().lower())
            .first()
        )

    def get_user_by_id(self, user_id: int) -> UserModel | None:
        return (
            self.db.query(UserModel)
            .filter(UserModel.id == user_id)
            .first()
        )
