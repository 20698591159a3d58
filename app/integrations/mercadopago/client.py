from __future__ import annotations

import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx


class MercadoPagoError(Exception):
    """Falha ao falar com o Mercado Pago (status não-2xx ou erro de rede)."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


@dataclass(slots=True)
class MercadoPagoPayment:
    """Representa uma resposta simplificada de pagamento PIX do Mercado Pago."""

    id: str
    status: str
    status_detail: str | None
    qr_code: str | None
    qr_code_base64: str | None
    raw: Dict[str, Any]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MercadoPagoPayment":
        point_of_interaction = data.get("point_of_interaction", {}) or {}
        transaction_data = point_of_interaction.get("transaction_data", {}) or {}

        qr_code_base64 = transaction_data.get("qr_code_base64")
        # Algumas respostas trazem o QR como imagem binária base64.
        if isinstance(qr_code_base64, dict) and "data" in qr_code_base64:
            qr_code_base64 = qr_code_base64.get("data")

        return cls(
            id=str(data.get("id")),
            status=data.get("status", "pending"),
            status_detail=data.get("status_detail"),
            qr_code=transaction_data.get("qr_code"),
            qr_code_base64=qr_code_base64,
            raw=data,
        )


def _mensagem_erro(resp: httpx.Response) -> str:
    """Extrai a mensagem que o Mercado Pago devolve no corpo de erro."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text or f"Mercado Pago retornou status {resp.status_code}"
    if isinstance(data, dict):
        causas = data.get("cause") or []
        if causas and isinstance(causas, list) and isinstance(causas[0], dict) and causas[0].get("description"):
            return causas[0]["description"]
        if data.get("message"):
            return data["message"]
    return f"Mercado Pago retornou status {resp.status_code}"


class MercadoPagoClient:
    """Cliente HTTP assíncrono para a API de pagamentos do Mercado Pago."""

    def __init__(
        self,
        *,
        access_token: str,
        base_url: str = "https://api.mercadopago.com",
        timeout: int = 20,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not access_token:
            raise ValueError("access_token é obrigatório para o Mercado Pago")

        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "MercadoPagoClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise MercadoPagoError(f"Falha de comunicação com o Mercado Pago: {e}") from e

        if resp.status_code >= 400:
            raise MercadoPagoError(_mensagem_erro(resp), status_code=resp.status_code, payload=resp.text)
        return resp.json()

    async def create_pix_payment(
        self,
        *,
        amount: Decimal,
        descricao: str,
        payer: Dict[str, Any],
        external_reference: str | None = None,
        metadata: Dict[str, Any] | None = None,
        idempotency_key: str | None = None,
    ) -> MercadoPagoPayment:
        """
        Cria uma cobrança PIX via `/v1/payments`.

        A mesma `idempotency_key` reenviada devolve a cobrança já criada em vez de duplicar.
        """
        payload: Dict[str, Any] = {
            "transaction_amount": float(amount),
            "description": descricao,
            "payment_method_id": "pix",
            "payer": payer,
            "metadata": metadata or {},
        }
        if external_reference:
            payload["external_reference"] = external_reference

        data = await self._request(
            "POST",
            "/v1/payments",
            json=payload,
            headers={"X-Idempotency-Key": idempotency_key or str(uuid.uuid4())},
        )
        return MercadoPagoPayment.from_dict(data)

    async def get_payment(self, payment_id: str) -> MercadoPagoPayment:
        data = await self._request("GET", f"/v1/payments/{payment_id}")
        return MercadoPagoPayment.from_dict(data)
