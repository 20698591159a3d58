from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.pagamentos.services.dependencies import get_webhook_notifier
from app.api.recuperacao_senha.schemas.schema_recuperacao import (
    MensagemResponse,
    RedefinirSenhaRequest,
    SolicitarRecuperacaoRequest,
    VerificarCodigoRequest,
    VerificarCodigoResponse,
)
from app.api.recuperacao_senha.services.service_recuperacao import RecuperacaoSenhaService
from app.database.db_connection import get_db
from app.integrations.webhooks.client import WebhookNotifier

router = APIRouter(prefix="/api/auth/recuperacao", tags=["auth"])


def get_recuperacao_service(
    db: Session = Depends(get_db),
    notifier: WebhookNotifier = Depends(get_webhook_notifier),
) -> RecuperacaoSenhaService:
    return RecuperacaoSenhaService(db, notifier)


@router.post("/solicitar", response_model=MensagemResponse)
async def solicitar_recuperacao(
    body: SolicitarRecuperacaoRequest,
    svc: RecuperacaoSenhaService = Depends(get_recuperacao_service),
):
    return await svc.solicitar(body)


@router.post("/verificar", response_model=VerificarCodigoResponse)
def verificar_codigo(
    body: VerificarCodigoRequest,
    svc: RecuperacaoSenhaService = Depends(get_recuperacao_service),
):
    return svc.verificar(body)


@router.post("/redefinir", response_model=MensagemResponse)
def redefinir_senha(
    body: RedefinirSenhaRequest,
    svc: RecuperacaoSenhaService = Depends(get_recuperacao_service),
):
    return svc.redefinir(body)
