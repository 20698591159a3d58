from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.api.cadastros.models.user_model import UserModel
from app.api.pagamentos.schemas.schema_pagamento import (
    ChavePublicaResponse,
    ConsultarStatusRequest,
    CriarPixRequest,
    CriarPixResponse,
    StatusPagamentoResponse,
)
from app.api.pagamentos.services.dependencies import get_mercadopago_client, get_webhook_notifier
from app.api.pagamentos.services.service_pagamento import PagamentoService
from app.config import settings
from app.core.admin_dependencies import get_optional_user
from app.database.db_connection import get_db
from app.integrations.mercadopago.client import MercadoPagoClient
from app.integrations.webhooks.client import WebhookNotifier
from app.utils.logger import logger

router = APIRouter(prefix="/api/pagamentos", tags=["Pagamentos"])


def get_pagamento_service(
    db: Session = Depends(get_db),
    mp_client: Optional[MercadoPagoClient] = Depends(get_mercadopago_client),
    notifier: WebhookNotifier = Depends(get_webhook_notifier),
) -> PagamentoService:
    return PagamentoService(db, mp_client, notifier)


@router.post("/pix", response_model=CriarPixResponse, status_code=status.HTTP_201_CREATED)
async def criar_pagamento_pix(
    payload: CriarPixRequest,
    x_idempotency_key: Optional[str] = Header(default=None),
    user: Optional[UserModel] = Depends(get_optional_user),
    svc: PagamentoService = Depends(get_pagamento_service),
):
    """
    Cria a cobrança PIX (análise de segurança ou taxa de cadastro de parceiro).
    Para análise, grava a submissão com pagamento pendente.
    """
    logger.info(f"[Pagamentos] Criar PIX finalidade={payload.finalidade.value}")
    return await svc.criar_pix(payload, idempotency_key=x_idempotency_key, user=user)


@router.post("/status", response_model=StatusPagamentoResponse)
async def consultar_status_pagamento(
    payload: ConsultarStatusRequest,
    svc: PagamentoService = Depends(get_pagamento_service),
):
    """Consulta o Mercado Pago (chamado em polling pelo front enquanto o QR está aberto)."""
    return await svc.consultar_status(payload)


@router.get("/chave-publica", response_model=ChavePublicaResponse)
def obter_chave_publica():
    if not settings.MERCADOPAGO_PUBLIC_KEY:
        logger.error("[Pagamentos] MERCADOPAGO_PUBLIC_KEY não configurada")
        raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "Chave pública não configurada")
    return ChavePublicaResponse(public_key=settings.MERCADOPAGO_PUBLIC_KEY)
