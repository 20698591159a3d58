# app/api/cadastros/models/user_model.py
from sqlalchemy import Column, Integer, String, DateTime, Enum as SAEnum

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed

AppRole = SAEnum("admin", "user", "master_partner", name="app_role_enum")


class UserModel(Base):
    """Usuário autenticável (cliente, parceiro, parceiro master ou admin)."""

    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(AppRole, nullable=False, default="user")

    # Perfil (antiga tabela profiles)
    nome = Column(String(100), nullable=True)
    whatsapp = Column(String(20), nullable=True)

    created_at = Column(DateTime, default=now_trimmed, nullable=False)
    updated_at = Column(DateTime, default=now_trimmed, onupdate=now_trimmed, nullable=False)
