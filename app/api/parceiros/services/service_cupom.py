from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.api.parceiros.models.model_parceiros import (
    MasterParceiroModel,
    ParceiroModel,
    UsoCupomMasterModel,
    VendaParceiroModel,
)
from app.api.parceiros.repositories.repo_parceiros import ParceirosRepository
from app.api.shared.schemas.schema_shared_enums import TipoCupomEnum
from app.api.submissoes.models.model_submissao import SubmissaoModel
from app.config import settings
from app.utils.logger import logger
from app.utils.validadores import cupom_formato_valido, normalizar_cupom

PRECO_MINIMO = Decimal("0.01")


@dataclass
class CupomResolvido:
    codigo: str
    tipo: TipoCupomEnum
    desconto: Decimal
    parceiro: Optional[ParceiroModel] = None
    master: Optional[MasterParceiroModel] = None


def preco_com_desconto(desconto: Decimal) -> Decimal:
    """Preço da análise após o desconto, nunca abaixo de R$ 0,01."""
    return max(settings.PRECO_ANALISE - desconto, PRECO_MINIMO).quantize(Decimal("0.01"))


class CupomService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ParceirosRepository(db)

    def buscar(self, codigo: Optional[str]) -> Optional[CupomResolvido]:
        """Resolve o cupom; None quando o formato é inválido ou o código não existe."""
        codigo = normalizar_cupom(codigo)
        if not codigo or not cupom_formato_valido(codigo):
            return None

        if codigo in settings.CUPONS_SISTEMA:
            return CupomResolvido(codigo, TipoCupomEnum.SISTEMA, settings.DESCONTO_CUPOM_SISTEMA)

        parceiro = self.repo.get_parceiro_by_coupon(codigo)
        if parceiro:
            return CupomResolvido(codigo, TipoCupomEnum.PARCEIRO, settings.DESCONTO_CUPOM_PARCEIRO, parceiro=parceiro)

        master = self.repo.get_master_by_coupon(codigo)
        if master:
            return CupomResolvido(codigo, TipoCupomEnum.MASTER, settings.DESCONTO_CUPOM_PARCEIRO, master=master)

        return None

    def resolver(self, codigo: Optional[str]) -> CupomResolvido:
        cupom = self.buscar(codigo)
        if not cupom:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Cupom inválido")
        return cupom

    def validar_cupom_master(self, codigo: Optional[str]) -> bool:
        codigo = normalizar_cupom(codigo)
        if not codigo:
            return False
        return self.repo.get_master_by_coupon(codigo) is not None

    def registrar_atribuicao(self, submissao: SubmissaoModel) -> None:
        """
        Grava a comissão do cupom usado na submissão (na transação corrente).
        Chamado uma única vez, quando o pagamento passa para approved.
        """
        if not submissao.cupom:
            return

        cupom = self.buscar(submissao.cupom)
        if not cupom:
            logger.warning(
                f"[Cupons] Cupom {submissao.cupom} da submissão {submissao.id} não existe mais; comissão não registrada"
            )
            return

        if cupom.tipo == TipoCupomEnum.PARCEIRO:
            if self.repo.get_venda_by_submissao(submissao.id):
                return
            parceiro = cupom.parceiro
            comissao_master = settings.COMISSAO_MASTER_INDIRETA if parceiro.master_parceiro_id else Decimal("0.00")
            self.repo.add(VendaParceiroModel(
                parceiro_id=parceiro.id,
                submissao_id=submissao.id,
                sale_value=submissao.valor,
                commission_value=settings.COMISSAO_PARCEIRO,
                master_commission_value=comissao_master,
                payment_status="pending",
            ))
            logger.info(f"[Cupons] Venda registrada parceiro_id={parceiro.id} submissao_id={submissao.id}")

        elif cupom.tipo == TipoCupomEnum.MASTER:
            if self.repo.get_uso_master_by_submissao(submissao.id):
                return
            self.repo.add(UsoCupomMasterModel(
                master_parceiro_id=cupom.master.id,
                submissao_id=submissao.id,
                payment_value=submissao.valor,
                commission_value=settings.COMISSAO_MASTER_DIRETA,
                payment_status="pending",
            ))
            logger.info(f"[Cupons] Uso de cupom master registrado master_id={cupom.master.id} submissao_id={submissao.id}")
