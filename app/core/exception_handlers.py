"""
Exception handlers globais para capturar e logar erros da API.

Todo corpo de erro carrega o campo ``error`` com a mensagem exibida ao usuário.
"""
import json
import traceback

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.utils.logger import logger


def _mensagem_validacao(error: dict) -> str:
    msg = error.get("msg", "Erro de validação")
    # pydantic prefixa erros de validators customizados com "Value error, "
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    loc = [str(p) for p in error.get("loc", []) if p not in ("body", "query", "path")]
    if error.get("type") == "missing" and loc:
        return f"Campo obrigatório: {loc[-1]}"
    return msg


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Erros de validação do FastAPI/Pydantic viram 400 com a primeira mensagem em ``error``.
    """
    errors = exc.errors()
    error_details = []

    for error in errors:
        field = ".".join(str(loc) for loc in error.get("loc", []))
        error_details.append({
            "field": field,
            "type": error.get("type", "unknown"),
            "message": _mensagem_validacao(error),
        })

    logger.warning(
        f"[VALIDATION ERROR] {request.method} {request.url.path} - "
        f"{json.dumps(error_details, ensure_ascii=False)}"
    )

    primeira = error_details[0]["message"] if error_details else "Dados inválidos"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": primeira,
            "detail": error_details,
        }
    )


async def http_exception_handler(request: Request, exc):
    """
    HTTPException dos services. ``detail`` pode ser texto ou um dict com ``error``
    e campos extras (ex.: ``remaining_attempts``), que são repassados no corpo.
    """
    status_code = exc.status_code
    log_message = (
        f"[HTTP ERROR {status_code}] {request.method} {request.url.path} - "
        f"Detalhes: {exc.detail}"
    )
    if status_code >= 500:
        logger.error(log_message)
    else:
        logger.warning(log_message)

    if isinstance(exc.detail, dict):
        content = dict(exc.detail)
        content.setdefault("error", "Erro na requisição")
        content.setdefault("detail", content["error"])
    else:
        content = {"error": str(exc.detail), "detail": str(exc.detail)}

    return JSONResponse(
        status_code=status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception):
    """
    Exceções não tratadas: detalhes só no log, mensagem genérica para o cliente.
    """
    logger.error(
        f"[UNHANDLED EXCEPTION] {request.method} {request.url.path} - "
        f"{type(exc).__name__}: {exc}"
    )
    logger.error(f"[UNHANDLED EXCEPTION] Traceback completo:\n{traceback.format_exc()}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Erro interno do servidor",
            "detail": "Erro interno do servidor",
        }
    )
