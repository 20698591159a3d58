from decimal import Decimal
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.api.cadastros.models.user_model import UserModel
from app.api.parceiros.repositories.repo_parceiros import ParceirosRepository
from app.api.submissoes.models.model_submissao import SubmissaoModel
from app.api.submissoes.repositories.repo_submissao import SubmissaoRepository
from app.api.submissoes.schemas.schema_submissao import EstatisticasOut, SubmissaoUpdate
from app.utils.logger import logger


def _moeda(valor) -> Decimal:
    # SUM no SQLite volta como float
    return Decimal(str(valor or 0)).quantize(Decimal("0.01"))


class SubmissaoService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = SubmissaoRepository(db)

    def get(self, submissao_id: int) -> SubmissaoModel:
        submissao = self.repo.get(submissao_id)
        if not submissao:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Submissão não encontrada")
        return submissao

    def listar_do_usuario(self, user: UserModel) -> List[SubmissaoModel]:
        return self.repo.list_by_usuario(user.id, user.email)

    def listar_aprovadas(self, status_analise: Optional[str] = None) -> List[SubmissaoModel]:
        return self.repo.list_aprovadas(status_analise)

    def listar_remarketing(self) -> List[SubmissaoModel]:
        return self.repo.list_nao_aprovadas()

    def atualizar(self, submissao_id: int, data: SubmissaoUpdate) -> SubmissaoModel:
        submissao = self.get(submissao_id)
        payload = data.model_dump(exclude_none=True)
        if not payload:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Nada para atualizar")

        for key, value in payload.items():
            setattr(submissao, key, value.value if hasattr(value, "value") else value)
        self.db.commit()
        self.db.refresh(submissao)
        logger.info(f"[Submissoes] Submissão {submissao_id} atualizada: {payload}")
        return submissao

    def deletar(self, submissao_id: int) -> None:
        submissao = self.get(submissao_id)
        self.repo.delete(submissao)
        self.db.commit()
        logger.info(f"[Submissoes] Submissão {submissao_id} removida")

    def estatisticas(self) -> EstatisticasOut:
        por_status = self.repo.contar_por_status_analise()
        comissoes_parceiros, comissoes_master = ParceirosRepository(self.db).soma_comissoes_pendentes()
        return EstatisticasOut(
            total_submissoes=sum(por_status.values()),
            pendentes=por_status.get("pendente", 0),
            seguros=por_status.get("seguro", 0),
            vulneraveis=por_status.get("vulneravel", 0),
            aguardando_pagamento=self.repo.contar_nao_aprovadas(),
            receita_total=_moeda(self.repo.receita_aprovada()),
            comissoes_parceiros_pendentes=_moeda(comissoes_parceiros),
            comissoes_master_pendentes=_moeda(comissoes_master),
        )
