"""
Disparo dos webhooks de automação (n8n): pagamento confirmado/expirado e recuperação de senha.

Entrega best-effort: uma tentativa, falhas só vão para o log e para as métricas.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from app.config.settings import (
    WEBHOOK_PAGAMENTO_CONFIRMADO_URL,
    WEBHOOK_PAGAMENTO_EXPIRADO_URL,
    WEBHOOK_RECUPERACAO_SENHA_URL,
    WEBHOOK_TIMEOUT_SECONDS,
)
from app.utils.logger import logger
from app.utils.prometheus_metrics import record_webhook


class WebhookNotifier:
    def __init__(
        self,
        *,
        urls: Optional[Dict[str, Optional[str]]] = None,
        timeout: int = WEBHOOK_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.urls = urls if urls is not None else {
            "pagamento_confirmado": WEBHOOK_PAGAMENTO_CONFIRMADO_URL,
            "pagamento_expirado": WEBHOOK_PAGAMENTO_EXPIRADO_URL,
            "recuperacao_senha": WEBHOOK_RECUPERACAO_SENHA_URL,
        }
        self.timeout = timeout
        self.transport = transport

    async def enviar(self, evento: str, payload: Dict[str, Any]) -> bool:
        """Envia o payload para a URL do evento. Retorna True quando o destino respondeu 2xx."""
        url = self.urls.get(evento)
        if not url:
            logger.warning(f"[Webhook] URL não configurada para o evento {evento}; envio ignorado")
            record_webhook(evento, "sem_url")
            return False

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post(
                    url,
                    json=payload,
                    headers={"User-Agent": "SecScan-Webhook/1.0"},
                )
        except httpx.HTTPError as e:
            logger.error(f"[Webhook] Erro ao enviar {evento}: {e}")
            record_webhook(evento, "erro")
            return False

        if 200 <= resp.status_code < 300:
            logger.info(f"[Webhook] {evento} enviado (status {resp.status_code})")
            record_webhook(evento, "sucesso")
            return True

        logger.error(f"[Webhook] {evento} retornou status {resp.status_code}")
        record_webhook(evento, "erro")
        return False
