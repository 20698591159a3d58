"""
Schemas compartilhados entre diferentes domínios
"""

from app.api.shared.schemas.schema_shared_enums import (
    RoleEnum,
    StatusAnaliseEnum,
    StatusContatoEnum,
    StatusComissaoEnum,
    PagamentoStatusEnum,
    FinalidadePagamentoEnum,
    TipoCadastroEnum,
    TipoCupomEnum,
    EventoWebhookEnum,
)

__all__ = [
    "RoleEnum",
    "StatusAnaliseEnum",
    "StatusContatoEnum",
    "StatusComissaoEnum",
    "PagamentoStatusEnum",
    "FinalidadePagamentoEnum",
    "TipoCadastroEnum",
    "TipoCupomEnum",
    "EventoWebhookEnum",
]
