# app/api/pagamentos/models/model_notificacao_pagamento.py
from sqlalchemy import Column, DateTime, Integer, String, UniqueConstraint

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed


class NotificacaoPagamentoModel(Base):
    """Registro de webhooks já disparados por pagamento (um por evento)."""

    __tablename__ = "notificacoes_pagamento"
    __table_args__ = (
        UniqueConstraint("payment_id", "evento", name="uq_notificacoes_pagamento_evento"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    payment_id = Column(String(64), nullable=False, index=True)
    evento = Column(String(40), nullable=False)
    enviado_em = Column(DateTime, default=now_trimmed, nullable=False)
