# app/api/submissoes/models/model_submissao.py
from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import relationship

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed

StatusAnalise = SAEnum("pendente", "seguro", "vulneravel", name="status_analise_enum")
StatusContato = SAEnum("pendente", "em_contato", "resolvido", name="status_contato_enum")


class SubmissaoModel(Base):
    """Pedido de análise de segurança de um site (criado junto com a cobrança PIX)."""

    __tablename__ = "submissoes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    nome = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    whatsapp = Column(String(20), nullable=False)
    url = Column(String(500), nullable=False)

    status_analise = Column(StatusAnalise, nullable=False, default="pendente")
    status_contato = Column(StatusContato, nullable=False, default="pendente")

    payment_status = Column(String(30), nullable=False, default="pending")
    payment_id = Column(String(64), nullable=True, unique=True, index=True)
    valor = Column(Numeric(10, 2), nullable=False)
    cupom = Column(String(20), nullable=True)

    user_id = Column(Integer, ForeignKey("usuarios.id", ondelete="SET NULL"), nullable=True, index=True)
    usuario = relationship("UserModel", lazy="joined")

    created_at = Column(DateTime, default=now_trimmed, nullable=False)
    updated_at = Column(DateTime, default=now_trimmed, onupdate=now_trimmed, nullable=False)
