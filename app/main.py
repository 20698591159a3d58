from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exception_handlers import (
    validation_exception_handler,
    http_exception_handler,
    general_exception_handler
)
from app.core.rls_middleware import RLSContextMiddleware
from app.utils.logger import logger
from app.utils.prometheus_metrics import PrometheusMiddleware
from app.config.settings import CORS_ORIGINS, CORS_ALLOW_ALL, BASE_URL, ENABLE_DOCS

# ───────────────────────────
# Importar modelos antes das rotas
# ───────────────────────────
from app.database.init_db import importar_models

importar_models()

from app.api.auth import auth_controller
from app.api.monitoring.router import router as monitoring_router, router_public as monitoring_router_public
from app.api.pagamentos.router.router_pagamentos import router as pagamentos_router
from app.api.parceiros.router.router_admin import router as parceiros_admin_router
from app.api.parceiros.router.router_cupons import router as cupons_router
from app.api.parceiros.router.router_parceiros import router as parceiros_router, router_master
from app.api.recuperacao_senha.router.router_recuperacao import router as recuperacao_router
from app.api.submissoes.router.router_submissoes import router as submissoes_router, router_admin as submissoes_admin_router

# ──────────────────────────
# Instância FastAPI
# ──────────────────────────
app = FastAPI(
    title="SecScan API",
    version="1.0.0",
    description="Análise de segurança de sites: pagamentos PIX, cupons de parceiros e back office",
    docs_url=("/swagger" if ENABLE_DOCS else None),
    redoc_url=("/redoc" if ENABLE_DOCS else None),
    openapi_url=("/openapi.json" if ENABLE_DOCS else None),
    servers=([{"url": BASE_URL, "description": "Base URL do ambiente"}] if BASE_URL else None),
    redirect_slashes=False
)

# ───────────────────────────
# Exception Handlers Globais
# ───────────────────────────
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

# ───────────────────────────
# Middlewares
# Executados na ORDEM REVERSA da adição (último adicionado = primeiro executado)
# ───────────────────────────
app.add_middleware(RLSContextMiddleware)
app.add_middleware(PrometheusMiddleware)


# CORS: origem "*" nunca vai com credentials
def _cors_config() -> dict:
    if CORS_ALLOW_ALL or not CORS_ORIGINS:
        return {"allow_origins": ["*"], "allow_credentials": False}
    return {"allow_origins": CORS_ORIGINS, "allow_credentials": True}


app.add_middleware(CORSMiddleware, allow_methods=["*"], allow_headers=["*"], **_cors_config())


# ───────────────────────────
# Startup / Shutdown
# ───────────────────────────
@app.on_event("startup")
async def startup():
    from app.database.init_db import inicializar_banco

    logger.info("Iniciando API e banco de dados...")
    inicializar_banco()
    logger.info("API iniciada com sucesso.")


@app.on_event("shutdown")
async def shutdown():
    logger.info("API encerrada.")


# ───────────────────────────
# Rotas
# ───────────────────────────
@app.get("/")
async def root():
    return {"status": "ok", "message": "API is running"}


@app.get("/health")
async def health():
    return {"status": "healthy"}


app.include_router(monitoring_router_public)
app.include_router(monitoring_router)

app.include_router(auth_controller.router)
app.include_router(recuperacao_router)
app.include_router(pagamentos_router)
app.include_router(cupons_router)
app.include_router(parceiros_router)
app.include_router(router_master)
app.include_router(submissoes_router)
app.include_router(submissoes_admin_router)
app.include_router(parceiros_admin_router)


# ───────────────────────────
# OpenAPI: Segurança Bearer/JWT no Swagger
# ───────────────────────────
PUBLIC_PATHS = {
    "/", "/health", "/api/auth/token", "/api/auth/cadastro",
    "/api/pagamentos/pix", "/api/pagamentos/status", "/api/pagamentos/chave-publica",
    "/api/parceiros/cadastro", "/api/master-parceiros/cadastro",
}


def _rota_publica(path: str) -> bool:
    return path in PUBLIC_PATHS or path.startswith(("/api/cupons", "/api/auth/recuperacao"))


def custom_openapi():
    if not app.openapi_schema:
        schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
            servers=app.servers,
        )
        schema.setdefault("components", {}).setdefault("securitySchemes", {})["bearerAuth"] = {
            "type": "http", "scheme": "bearer", "bearerFormat": "JWT",
        }
        schema["security"] = [{"bearerAuth": []}]
        # Rotas públicas não exigem token no Swagger
        for path, metodos in schema.get("paths", {}).items():
            if _rota_publica(path):
                for operacao in metodos.values():
                    operacao["security"] = []
        app.openapi_schema = schema
    return app.openapi_schema


app.openapi = custom_openapi
