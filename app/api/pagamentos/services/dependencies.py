from typing import AsyncIterator, Optional

from app.config import settings
from app.integrations.mercadopago.client import MercadoPagoClient
from app.integrations.webhooks.client import WebhookNotifier


async def get_mercadopago_client() -> AsyncIterator[Optional[MercadoPagoClient]]:
    """
    Cliente Mercado Pago por request. Sem access token devolve None e os services
    respondem "Configuração de pagamento ausente" depois de validar o payload.
    """
    if not settings.MERCADOPAGO_ACCESS_TOKEN:
        yield None
        return

    async with MercadoPagoClient(
        access_token=settings.MERCADOPAGO_ACCESS_TOKEN,
        base_url=settings.MERCADOPAGO_BASE_URL,
        timeout=settings.MERCADOPAGO_TIMEOUT_SECONDS,
    ) as client:
        yield client


def get_webhook_notifier() -> WebhookNotifier:
    return WebhookNotifier()
