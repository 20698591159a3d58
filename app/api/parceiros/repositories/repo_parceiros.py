from typing import List, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from app.api.parceiros.models.model_parceiros import (
    ConfiguracaoCadastroModel,
    MasterParceiroModel,
    ParceiroModel,
    UsoCupomMasterModel,
    VendaParceiroModel,
)
from app.utils.database_utils import now_trimmed


class ParceirosRepository:
    def __init__(self, db: Session):
        self.db = db

    # ---------------- PARCEIRO ----------------
    def get_parceiro_by_coupon(self, codigo: str) -> Optional[ParceiroModel]:
        return self.db.query(ParceiroModel).filter(ParceiroModel.coupon_code == codigo).first()

    def get_parceiro_by_cpf(self, cpf: str) -> Optional[ParceiroModel]:
        return self.db.query(ParceiroModel).filter(ParceiroModel.cpf == cpf).first()

    def get_parceiro_by_user(self, user_id: int) -> Optional[ParceiroModel]:
        return self.db.query(ParceiroModel).filter(ParceiroModel.user_id == user_id).first()

    def get_parceiro_by_pagamento(self, pagamento_id: str) -> Optional[ParceiroModel]:
        return self.db.query(ParceiroModel).filter(ParceiroModel.pagamento_id == pagamento_id).first()

    def list_parceiros(self) -> List[ParceiroModel]:
        return self.db.query(ParceiroModel).order_by(ParceiroModel.created_at.desc(), ParceiroModel.id.desc()).all()

    def list_parceiros_by_master(self, master_id: int) -> List[ParceiroModel]:
        return (
            self.db.query(ParceiroModel)
            .filter(ParceiroModel.master_parceiro_id == master_id)
            .order_by(ParceiroModel.created_at.desc())
            .all()
        )

    # ---------------- MASTER ----------------
    def get_master_by_coupon(self, codigo: str) -> Optional[MasterParceiroModel]:
        return self.db.query(MasterParceiroModel).filter(MasterParceiroModel.coupon_code == codigo).first()

    def get_master_by_cpf(self, cpf: str) -> Optional[MasterParceiroModel]:
        return self.db.query(MasterParceiroModel).filter(MasterParceiroModel.cpf == cpf).first()

    def get_master_by_user(self, user_id: int) -> Optional[MasterParceiroModel]:
        return self.db.query(MasterParceiroModel).filter(MasterParceiroModel.user_id == user_id).first()

    def list_masters(self) -> List[MasterParceiroModel]:
        return self.db.query(MasterParceiroModel).order_by(MasterParceiroModel.created_at.desc()).all()

    def coupon_em_uso(self, codigo: str) -> bool:
        """Cupons são únicos entre parceiros e masters."""
        return bool(self.get_parceiro_by_coupon(codigo) or self.get_master_by_coupon(codigo))

    def add(self, obj):
        self.db.add(obj)
        self.db.flush()
        return obj

    # ---------------- VENDAS ----------------
    def get_venda(self, venda_id: int) -> Optional[VendaParceiroModel]:
        return self.db.get(VendaParceiroModel, venda_id)

    def get_venda_by_submissao(self, submissao_id: int) -> Optional[VendaParceiroModel]:
        return self.db.query(VendaParceiroModel).filter(VendaParceiroModel.submissao_id == submissao_id).first()

    def list_vendas(self, status: Optional[str] = None) -> List[VendaParceiroModel]:
        query = self.db.query(VendaParceiroModel)
        if status:
            query = query.filter(VendaParceiroModel.payment_status == status)
        return query.order_by(VendaParceiroModel.created_at.desc(), VendaParceiroModel.id.desc()).all()

    def list_vendas_by_parceiros(self, parceiro_ids: List[int]) -> List[VendaParceiroModel]:
        if not parceiro_ids:
            return []
        return (
            self.db.query(VendaParceiroModel)
            .filter(VendaParceiroModel.parceiro_id.in_(parceiro_ids))
            .order_by(VendaParceiroModel.created_at.desc())
            .all()
        )

    def marcar_venda_paga(self, venda_id: int, comprovante_url: Optional[str]) -> bool:
        """pending -> paid uma única vez (update condicional)."""
        result = self.db.execute(
            update(VendaParceiroModel)
            .where(VendaParceiroModel.id == venda_id, VendaParceiroModel.payment_status == "pending")
            .values(payment_status="paid", paid_at=now_trimmed(), payment_receipt_url=comprovante_url)
        )
        return result.rowcount == 1

    # ---------------- USOS CUPOM MASTER ----------------
    def get_uso_master(self, uso_id: int) -> Optional[UsoCupomMasterModel]:
        return self.db.get(UsoCupomMasterModel, uso_id)

    def get_uso_master_by_submissao(self, submissao_id: int) -> Optional[UsoCupomMasterModel]:
        return self.db.query(UsoCupomMasterModel).filter(UsoCupomMasterModel.submissao_id == submissao_id).first()

    def list_usos_master(self, status: Optional[str] = None) -> List[UsoCupomMasterModel]:
        query = self.db.query(UsoCupomMasterModel)
        if status:
            query = query.filter(UsoCupomMasterModel.payment_status == status)
        return query.order_by(UsoCupomMasterModel.created_at.desc(), UsoCupomMasterModel.id.desc()).all()

    def marcar_uso_master_pago(self, uso_id: int, comprovante_url: Optional[str]) -> bool:
        result = self.db.execute(
            update(UsoCupomMasterModel)
            .where(UsoCupomMasterModel.id == uso_id, UsoCupomMasterModel.payment_status == "pending")
            .values(payment_status="paid", paid_at=now_trimmed(), payment_receipt_url=comprovante_url)
        )
        return result.rowcount == 1

    def soma_comissoes_pendentes(self):
        vendas = (
            self.db.query(func.coalesce(func.sum(VendaParceiroModel.commission_value), 0))
            .filter(VendaParceiroModel.payment_status == "pending")
            .scalar()
        )
        usos = (
            self.db.query(func.coalesce(func.sum(UsoCupomMasterModel.commission_value), 0))
            .filter(UsoCupomMasterModel.payment_status == "pending")
            .scalar()
        )
        return vendas, usos


class ConfiguracaoCadastroRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, tipo: str) -> Optional[ConfiguracaoCadastroModel]:
        return self.db.query(ConfiguracaoCadastroModel).filter(ConfiguracaoCadastroModel.tipo == tipo).first()

    def desabilitar_se_habilitado(self, tipo: str) -> bool:
        result = self.db.execute(
            update(ConfiguracaoCadastroModel)
            .where(ConfiguracaoCadastroModel.tipo == tipo, ConfiguracaoCadastroModel.cadastro_habilitado.is_(True))
            .values(cadastro_habilitado=False, updated_at=now_trimmed())
        )
        return result.rowcount == 1
