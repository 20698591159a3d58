from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.parceiros.schemas.schema_parceiros import (
    ConfiguracaoCadastroOut,
    ConfiguracaoCadastroUpdate,
    MarcarPagoRequest,
    MasterParceiroOut,
    ParceiroOut,
    UsoCupomMasterOut,
    VendaParceiroOut,
)
from app.api.parceiros.services.service_parceiros import ParceirosService
from app.api.shared.schemas.schema_shared_enums import StatusComissaoEnum, TipoCadastroEnum
from app.core.admin_dependencies import require_admin
from app.database.db_connection import get_db

router = APIRouter(prefix="/api/admin", tags=["Admin - Parceiros"], dependencies=[Depends(require_admin)])


@router.get("/parceiros", response_model=List[ParceiroOut])
def listar_parceiros(db: Session = Depends(get_db)):
    return ParceirosService(db).listar_parceiros()


@router.get("/master-parceiros", response_model=List[MasterParceiroOut])
def listar_masters(db: Session = Depends(get_db)):
    return ParceirosService(db).listar_masters()


@router.get("/vendas", response_model=List[VendaParceiroOut])
def listar_vendas(
    payment_status: Optional[StatusComissaoEnum] = Query(default=None),
    db: Session = Depends(get_db),
):
    return ParceirosService(db).listar_vendas(payment_status.value if payment_status else None)


@router.post("/vendas/{venda_id}/pagar", response_model=VendaParceiroOut)
def pagar_venda(venda_id: int, body: Optional[MarcarPagoRequest] = None, db: Session = Depends(get_db)):
    """Marca a comissão do parceiro como paga (uma única vez)."""
    comprovante = body.comprovante_url if body else None
    return ParceirosService(db).marcar_venda_paga(venda_id, comprovante)


@router.get("/usos-master", response_model=List[UsoCupomMasterOut])
def listar_usos_master(
    payment_status: Optional[StatusComissaoEnum] = Query(default=None),
    db: Session = Depends(get_db),
):
    return ParceirosService(db).listar_usos_master(payment_status.value if payment_status else None)


@router.post("/usos-master/{uso_id}/pagar", response_model=UsoCupomMasterOut)
def pagar_uso_master(uso_id: int, body: Optional[MarcarPagoRequest] = None, db: Session = Depends(get_db)):
    comprovante = body.comprovante_url if body else None
    return ParceirosService(db).marcar_uso_master_pago(uso_id, comprovante)


@router.patch("/configuracoes/{tipo}", response_model=ConfiguracaoCadastroOut)
def atualizar_configuracao(
    tipo: TipoCadastroEnum,
    body: ConfiguracaoCadastroUpdate,
    db: Session = Depends(get_db),
):
    return ParceirosService(db).atualizar_configuracao(tipo.value, body)


@router.get("/configuracoes/{tipo}", response_model=ConfiguracaoCadastroOut)
def obter_configuracao(tipo: TipoCadastroEnum, db: Session = Depends(get_db)):
    config = ParceirosService(db).obter_configuracao(tipo.value)
    db.commit()
    return config
