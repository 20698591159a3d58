from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.api.shared.schemas.schema_shared_enums import StatusAnaliseEnum, StatusContatoEnum


class SubmissaoOut(BaseModel):
    id: int
    nome: str
    email: str
    whatsapp: str
    url: str
    status_analise: StatusAnaliseEnum
    status_contato: StatusContatoEnum
    payment_status: str
    payment_id: Optional[str] = None
    valor: Decimal
    cupom: Optional[str] = None
    user_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


class SubmissaoUpdate(BaseModel):
    status_analise: Optional[StatusAnaliseEnum] = None
    status_contato: Optional[StatusContatoEnum] = None


class EstatisticasOut(BaseModel):
    total_submissoes: int
    pendentes: int
    seguros: int
    vulneraveis: int
    aguardando_pagamento: int
    receita_total: Decimal
    comissoes_parceiros_pendentes: Decimal
    comissoes_master_pendentes: Decimal
