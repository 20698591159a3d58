from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.cadastros.models.user_model import UserModel
from app.api.pagamentos.services.dependencies import get_mercadopago_client
from app.api.parceiros.schemas.schema_parceiros import (
    CadastroMasterRequest,
    CadastroMasterResponse,
    CadastroParceiroRequest,
    CadastroParceiroResponse,
    PainelMasterOut,
    PainelParceiroOut,
)
from app.api.parceiros.services.service_parceiros import ParceirosService
from app.core.admin_dependencies import get_current_user, require_role
from app.database.db_connection import get_db
from app.integrations.mercadopago.client import MercadoPagoClient

router = APIRouter(prefix="/api/parceiros", tags=["Parceiros"])
router_master = APIRouter(prefix="/api/master-parceiros", tags=["Parceiros Master"])


@router.post("/cadastro", response_model=CadastroParceiroResponse)
async def cadastrar_parceiro(
    body: CadastroParceiroRequest,
    db: Session = Depends(get_db),
    mp_client: Optional[MercadoPagoClient] = Depends(get_mercadopago_client),
):
    """
    Auto cadastro de parceiro. Com cupom de Parceiro Master válido a taxa é isenta;
    sem ele é preciso informar um payment_id aprovado.
    """
    return await ParceirosService(db).cadastrar_parceiro(body, mp_client)


@router.get("/me", response_model=PainelParceiroOut)
def painel_parceiro(
    current_user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return ParceirosService(db).painel_parceiro(current_user)


@router_master.post("/cadastro", response_model=CadastroMasterResponse)
def cadastrar_master(body: CadastroMasterRequest, db: Session = Depends(get_db)):
    return ParceirosService(db).cadastrar_master(body)


@router_master.get("/me", response_model=PainelMasterOut)
def painel_master(
    current_user: UserModel = Depends(require_role(["master_partner"])),
    db: Session = Depends(get_db),
):
    return ParceirosService(db).painel_master(current_user)
