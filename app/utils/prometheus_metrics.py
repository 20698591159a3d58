"""
Métricas Prometheus da API (HTTP + pagamentos + webhooks).
"""
import re
from time import time
from typing import Callable

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

# Requisições HTTP
http_requests_total = Counter(
    'secscan_http_requests_total',
    'Total de requisições HTTP',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'secscan_http_request_duration_seconds',
    'Duração das requisições HTTP em segundos',
    ['method', 'endpoint'],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0]
)

# Pagamentos PIX
pix_cobrancas_total = Counter(
    'secscan_pix_cobrancas_total',
    'Cobranças PIX solicitadas ao Mercado Pago',
    ['finalidade', 'resultado']
)

pix_consultas_total = Counter(
    'secscan_pix_consultas_total',
    'Consultas de status de pagamento por status retornado',
    ['status']
)

# Webhooks de automação
webhooks_total = Counter(
    'secscan_webhooks_total',
    'Webhooks de automação por evento e resultado',
    ['evento', 'resultado']
)

# Logs
log_messages_total = Counter(
    'secscan_log_messages_total',
    'Total de mensagens de log',
    ['level']
)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Coleta contagem e duração das requisições HTTP."""

    async def dispatch(self, request: Request, call_next: Callable):
        if request.url.path == "/metrics":
            return await call_next(request)

        method = request.method
        endpoint = normalize_endpoint(request.url.path)
        start_time = time()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            http_requests_total.labels(
                method=method,
                endpoint=endpoint,
                status_code=status_code
            ).inc()
            http_request_duration_seconds.labels(
                method=method,
                endpoint=endpoint
            ).observe(time() - start_time)


def normalize_endpoint(endpoint: str) -> str:
    """
    Remove IDs do path para evitar alta cardinalidade.
    Ex: /api/admin/submissoes/123 -> /api/admin/submissoes/{id}
    """
    endpoint = re.sub(r'/[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}', '/{uuid}', endpoint)
    endpoint = re.sub(r'/\d+', '/{id}', endpoint)
    return endpoint


def get_metrics():
    """Retorna as métricas no formato Prometheus."""
    return generate_latest()


def record_log(level: str):
    log_messages_total.labels(level=level).inc()


def record_pix_cobranca(finalidade: str, resultado: str):
    pix_cobrancas_total.labels(finalidade=finalidade, resultado=resultado).inc()


def record_pix_consulta(status: str):
    pix_consultas_total.labels(status=status or "desconhecido").inc()


def record_webhook(evento: str, resultado: str):
    webhooks_total.labels(evento=evento, resultado=resultado).inc()


__all__ = [
    "CONTENT_TYPE_LATEST",
    "PrometheusMiddleware",
    "get_metrics",
    "record_log",
    "record_pix_cobranca",
    "record_pix_consulta",
    "record_webhook",
]
