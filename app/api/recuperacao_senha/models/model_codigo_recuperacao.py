# app/api/recuperacao_senha/models/model_codigo_recuperacao.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


class CodigoRecuperacaoModel(Base):
    __tablename__ = "codigos_recuperacao"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)
    code = Column(String(8), nullable=False)
    attempts = Column(Integer, nullable=False, default=0)
    max_attempts = Column(Integer, nullable=False, default=5)
    expires_at = Column(DateTime, nullable=False)
    used = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=now_trimmed, nullable=False)
