from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from app.core.rls_context import reset_rls_context, set_rls_context
from app.core.security import decode_access_token


class RLSContextMiddleware(BaseHTTPMiddleware):
    """
    Lê o Bearer token (sem consultar o banco) e publica user_id/role no contexto do request,
    para o get_db aplicar `app.user_id`/`app.role` nas políticas RLS do Postgres.
    """

    async def dispatch(self, request: Request, call_next):
        user_id = None
        role = None
        auth_header = request.headers.get("Authorization") or ""
        if auth_header.startswith("Bearer "):
            payload = decode_access_token(auth_header[len("Bearer "):].strip())
            if payload:
                try:
                    user_id = int(payload.get("sub"))
                except (TypeError, ValueError):
                    user_id = None
                role = payload.get("role")

        tokens = set_rls_context(user_id, role)
        try:
            return await call_next(request)
        finally:
            reset_rls_context(tokens)
