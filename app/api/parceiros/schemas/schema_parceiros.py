"""
Schemas de Parceiros, Parceiros Master e comissões
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, AliasChoices

from app.api.shared.schemas.schema_shared_enums import StatusComissaoEnum, TipoCupomEnum


# ---------------- Cupons ----------------
class CupomValidacaoOut(BaseModel):
    codigo: str
    valido: bool
    tipo: Optional[TipoCupomEnum] = None
    desconto: Decimal = Decimal("0.00")
    valor_final: Decimal


class CupomMasterValidacaoOut(BaseModel):
    valido: bool


# ---------------- Cadastro ----------------
class CadastroParceiroRequest(BaseModel):
    # Aceita também os nomes camelCase enviados pelo formulário
    nome: Optional[str] = None
    whatsapp: Optional[str] = None
    cpf: Optional[str] = None
    pix_key: Optional[str] = Field(default=None, validation_alias=AliasChoices("pix_key", "pixKey"))
    coupon_code: Optional[str] = Field(default=None, validation_alias=AliasChoices("coupon_code", "couponCode"))
    email: Optional[str] = None
    password: Optional[str] = None
    master_coupon: Optional[str] = Field(default=None, validation_alias=AliasChoices("master_coupon", "masterCoupon"))
    payment_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("payment_id", "paymentId"))


class CadastroParceiroResponse(BaseModel):
    success: bool = True
    message: str
    used_master_coupon: bool


class CadastroMasterRequest(BaseModel):
    nome: Optional[str] = None
    cpf: Optional[str] = None
    whatsapp: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    coupon_code: Optional[str] = None


class CadastroMasterResponse(BaseModel):
    success: bool = True
    user_id: int


# ---------------- Vendas / usos ----------------
class VendaParceiroOut(BaseModel):
    id: int
    parceiro_id: int
    submissao_id: Optional[int] = None
    sale_value: Decimal
    commission_value: Decimal
    master_commission_value: Decimal
    payment_status: StatusComissaoEnum
    payment_receipt_url: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class UsoCupomMasterOut(BaseModel):
    id: int
    master_parceiro_id: int
    submissao_id: Optional[int] = None
    payment_value: Decimal
    commission_value: Decimal
    payment_status: StatusComissaoEnum
    payment_receipt_url: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class MarcarPagoRequest(BaseModel):
    comprovante_url: Optional[str] = None


# ---------------- Parceiros ----------------
class ParceiroOut(BaseModel):
    id: int
    user_id: int
    nome: str
    cpf: str
    whatsapp: str
    pix_key: str
    coupon_code: str
    master_parceiro_id: Optional[int] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class MasterParceiroOut(BaseModel):
    id: int
    user_id: int
    nome: str
    cpf: str
    whatsapp: str
    email: str
    coupon_code: str
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class TotaisComissaoOut(BaseModel):
    quantidade: int = 0
    a_receber: Decimal = Decimal("0.00")
    recebido: Decimal = Decimal("0.00")


class PainelParceiroOut(BaseModel):
    parceiro: ParceiroOut
    vendas: List[VendaParceiroOut] = []
    totais: TotaisComissaoOut


class ParceiroIndicadoOut(BaseModel):
    id: int
    nome: str
    coupon_code: str
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class PainelMasterOut(BaseModel):
    master: MasterParceiroOut
    usos_cupom: List[UsoCupomMasterOut] = []
    parceiros_indicados: List[ParceiroIndicadoOut] = []
    vendas_indiretas: List[VendaParceiroOut] = []
    totais_diretos: TotaisComissaoOut
    totais_indiretos: TotaisComissaoOut


# ---------------- Configurações ----------------
class ConfiguracaoCadastroOut(BaseModel):
    tipo: str
    cadastro_habilitado: bool
    valor_cadastro: Decimal
    model_config = ConfigDict(from_attributes=True)


class ConfiguracaoCadastroUpdate(BaseModel):
    cadastro_habilitado: Optional[bool] = None
    valor_cadastro: Optional[Decimal] = Field(default=None, ge=0)
