from typing import List, Optional

from sqlalchemy import func, or_, update
from sqlalchemy.orm import Session

from app.api.submissoes.models.model_submissao import SubmissaoModel
from app.utils.database_utils import now_trimmed

APROVADO = "approved"


class SubmissaoRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, id_: int) -> Optional[SubmissaoModel]:
        return self.db.get(SubmissaoModel, id_)

    def get_by_payment_id(self, payment_id: str) -> Optional[SubmissaoModel]:
        return (
            self.db.query(SubmissaoModel)
            .filter(SubmissaoModel.payment_id == str(payment_id))
            .first()
        )

    def create(self, obj: SubmissaoModel) -> SubmissaoModel:
        self.db.add(obj)
        self.db.flush()
        return obj

    def delete(self, obj: SubmissaoModel) -> None:
        self.db.delete(obj)
        self.db.flush()

    def marcar_aprovado(self, payment_id: str) -> bool:
        """
        Transição pending -> approved via update condicional.
        Só a primeira consulta concorrente recebe True.
        """
        result = self.db.execute(
            update(SubmissaoModel)
            .where(SubmissaoModel.payment_id == str(payment_id), SubmissaoModel.payment_status != APROVADO)
            .values(payment_status=APROVADO, updated_at=now_trimmed())
        )
        return result.rowcount == 1

    def atualizar_status_pagamento(self, payment_id: str, status: str) -> bool:
        """Registra status intermediários/finais sem nunca sair de approved."""
        result = self.db.execute(
            update(SubmissaoModel)
            .where(
                SubmissaoModel.payment_id == str(payment_id),
                SubmissaoModel.payment_status != APROVADO,
                SubmissaoModel.payment_status != status,
            )
            .values(payment_status=status, updated_at=now_trimmed())
        )
        return result.rowcount == 1

    def list_aprovadas(self, status_analise: Optional[str] = None) -> List[SubmissaoModel]:
        query = self.db.query(SubmissaoModel).filter(SubmissaoModel.payment_status == APROVADO)
        if status_analise:
            query = query.filter(SubmissaoModel.status_analise == status_analise)
        return query.order_by(SubmissaoModel.created_at.desc(), SubmissaoModel.id.desc()).all()

    def list_nao_aprovadas(self) -> List[SubmissaoModel]:
        return (
            self.db.query(SubmissaoModel)
            .filter(SubmissaoModel.payment_status != APROVADO)
            .order_by(SubmissaoModel.created_at.desc(), SubmissaoModel.id.desc())
            .all()
        )

    def list_by_usuario(self, user_id: int, email: str) -> List[SubmissaoModel]:
        return (
            self.db.query(SubmissaoModel)
            .filter(or_(
                SubmissaoModel.user_id == user_id,
                func.lower(SubmissaoModel.email) == email.lower(),
            ))
            .order_by(SubmissaoModel.created_at.desc(), SubmissaoModel.id.desc())
            .all()
        )

    def contar_por_status_analise(self) -> dict:
        rows = (
            self.db.query(SubmissaoModel.status_analise, func.count(SubmissaoModel.id))
            .filter(SubmissaoModel.payment_status == APROVADO)
            .group_by(SubmissaoModel.status_analise)
            .all()
        )
        return {status: total for status, total in rows}

    def contar_nao_aprovadas(self) -> int:
        return (
            self.db.query(func.count(SubmissaoModel.id))
            .filter(SubmissaoModel.payment_status != APROVADO)
            .scalar()
        )

    def receita_aprovada(self):
        return (
            self.db.query(func.coalesce(func.sum(SubmissaoModel.valor), 0))
            .filter(SubmissaoModel.payment_status == APROVADO)
            .scalar()
        )
