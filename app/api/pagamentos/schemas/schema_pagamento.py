from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, AliasChoices, field_validator

from app.api.shared.schemas.schema_shared_enums import FinalidadePagamentoEnum


class CriarPixRequest(BaseModel):
    nome: Optional[str] = None
    email: Optional[str] = None
    whatsapp: Optional[str] = None
    url: Optional[str] = None
    cupom: Optional[str] = None
    finalidade: FinalidadePagamentoEnum = FinalidadePagamentoEnum.ANALISE


class CriarPixResponse(BaseModel):
    payment_id: str
    status: str
    qr_code: Optional[str] = None
    qr_code_base64: Optional[str] = None
    valor: Decimal
    desconto: Decimal = Decimal("0.00")
    cupom_aplicado: Optional[str] = None
    submissao_id: Optional[int] = None


class ConsultarStatusRequest(BaseModel):
    payment_id: Optional[str] = None
    # Dados reenviados pelo front; usados no webhook quando não há submissão
    cliente_nome: Optional[str] = None
    cliente_whatsapp: Optional[str] = None
    valor: Optional[Decimal] = None
    cupom_usado: Optional[str] = Field(default=None, validation_alias=AliasChoices("cupom_usado", "cupom_utilizado"))

    @field_validator("payment_id", mode="before")
    @classmethod
    def _payment_id_str(cls, v):
        # Mercado Pago devolve o id como número
        if v is None:
            return None
        return str(v).strip()


class StatusPagamentoResponse(BaseModel):
    payment_id: str
    status: str
    status_detail: Optional[str] = None


class ChavePublicaResponse(BaseModel):
    public_key: str
