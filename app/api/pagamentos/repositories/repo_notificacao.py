from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.pagamentos.models.model_notificacao_pagamento import NotificacaoPagamentoModel


class NotificacaoPagamentoRepository:
    def __init__(self, db: Session):
        self.db = db

    def ja_enviada(self, payment_id: str, evento: str) -> bool:
        return (
            self.db.query(NotificacaoPagamentoModel.id)
            .filter(
                NotificacaoPagamentoModel.payment_id == str(payment_id),
                NotificacaoPagamentoModel.evento == evento,
            )
            .first()
            is not None
        )

    def reservar(self, payment_id: str, evento: str) -> bool:
        """
        Grava (payment_id, evento) antes do envio. False quando outra consulta já reservou;
        a unique constraint resolve consultas concorrentes.
        """
        if self.ja_enviada(payment_id, evento):
            return False
        self.db.add(NotificacaoPagamentoModel(payment_id=str(payment_id), evento=evento))
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return False
        return True
