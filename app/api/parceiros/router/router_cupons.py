from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.parceiros.schemas.schema_parceiros import CupomMasterValidacaoOut, CupomValidacaoOut
from app.api.parceiros.services.service_cupom import CupomService, preco_com_desconto
from app.config import settings
from app.database.db_connection import get_db
from app.utils.validadores import normalizar_cupom

router = APIRouter(prefix="/api/cupons", tags=["Cupons"])


@router.get("/master/{codigo}", response_model=CupomMasterValidacaoOut)
def validar_cupom_master(codigo: str, db: Session = Depends(get_db)):
    """Usado no formulário de cadastro de parceiro para isentar a taxa."""
    return CupomMasterValidacaoOut(valido=CupomService(db).validar_cupom_master(codigo))


@router.get("/{codigo}", response_model=CupomValidacaoOut)
def validar_cupom(codigo: str, db: Session = Depends(get_db)):
    cupom = CupomService(db).buscar(codigo)
    if not cupom:
        return CupomValidacaoOut(
            codigo=normalizar_cupom(codigo) or "",
            valido=False,
            valor_final=settings.PRECO_ANALISE,
        )
    return CupomValidacaoOut(
        codigo=cupom.codigo,
        valido=True,
        tipo=cupom.tipo,
        desconto=cupom.desconto,
        valor_final=preco_com_desconto(cupom.desconto),
    )
