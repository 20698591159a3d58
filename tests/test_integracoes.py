import asyncio
import json
from decimal import Decimal

import httpx
import pytest

from app.integrations.mercadopago.client import MercadoPagoClient, MercadoPagoError
from app.integrations.webhooks.client import WebhookNotifier


def _mp(handler):
    return MercadoPagoClient(access_token="TEST-token", transport=httpx.MockTransport(handler))


def test_criar_pix_envia_idempotency_key_e_le_qr_code():
    recebidos = []

    def handler(request):
        recebidos.append(request)
        return httpx.Response(201, json={
            "id": 123,
            "status": "pending",
            "status_detail": "pending_waiting_transfer",
            "point_of_interaction": {"transaction_data": {"qr_code": "pix-copia-cola", "qr_code_base64": "aGVsbG8="}},
        })

    async def run():
        async with _mp(handler) as mp:
            return await mp.create_pix_payment(
                amount=Decimal("19.90"),
                descricao="Teste",
                payer={"email": "ana@x.com"},
                idempotency_key="chave-1",
            )

    payment = asyncio.run(run())
    assert payment.id == "123"
    assert payment.qr_code == "pix-copia-cola"
    assert recebidos[0].headers["X-Idempotency-Key"] == "chave-1"
    assert recebidos[0].headers["Authorization"] == "Bearer TEST-token"
    corpo = json.loads(recebidos[0].content)
    assert corpo["transaction_amount"] == 19.9
    assert corpo["payment_method_id"] == "pix"


def test_erro_do_mercado_pago_traz_mensagem_da_causa():
    def handler(request):
        return httpx.Response(400, json={
            "message": "bad_request",
            "cause": [{"code": 4020, "description": "notification_url attribute must be url valid"}],
        })

    async def run():
        async with _mp(handler) as mp:
            await mp.get_payment("1")

    with pytest.raises(MercadoPagoError) as exc:
        asyncio.run(run())
    assert exc.value.status_code == 400
    assert exc.value.message == "notification_url attribute must be url valid"


def test_falha_de_rede_vira_mercado_pago_error():
    def handler(request):
        raise httpx.ConnectError("sem rede", request=request)

    async def run():
        async with _mp(handler) as mp:
            await mp.get_payment("1")

    with pytest.raises(MercadoPagoError):
        asyncio.run(run())


def test_webhook_envia_para_url_do_evento():
    recebidos = []

    def handler(request):
        recebidos.append(request)
        return httpx.Response(200)

    notifier = WebhookNotifier(
        urls={"pagamento_confirmado": "https://n8n.local/webhook/ok"},
        transport=httpx.MockTransport(handler),
    )
    assert asyncio.run(notifier.enviar("pagamento_confirmado", {"nome": "Ana"})) is True
    assert str(recebidos[0].url) == "https://n8n.local/webhook/ok"
    assert json.loads(recebidos[0].content) == {"nome": "Ana"}


def test_webhook_sem_url_ou_com_erro_nao_propaga():
    notifier = WebhookNotifier(
        urls={"pagamento_expirado": "https://n8n.local/webhook/falha"},
        transport=httpx.MockTransport(lambda request: httpx.Response(500)),
    )
    assert asyncio.run(notifier.enviar("pagamento_expirado", {})) is False
    assert asyncio.run(notifier.enviar("recuperacao_senha", {})) is False
