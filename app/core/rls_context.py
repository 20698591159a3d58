from __future__ import annotations

from contextvars import ContextVar, Token
from typing import Optional

# Contexto por request (task-local) para RLS no Postgres.
_rls_user_id: ContextVar[Optional[int]] = ContextVar("rls_user_id", default=None)
_rls_role: ContextVar[Optional[str]] = ContextVar("rls_role", default=None)


def set_rls_context(user_id: Optional[int], role: Optional[str]) -> tuple[Token, Token]:
    """
    Define o contexto RLS do request atual.
    Retorna tokens para permitir reset seguro no final do request.
    """
    return _rls_user_id.set(user_id), _rls_role.set(role)


def reset_rls_context(tokens: tuple[Token, Token]) -> None:
    t1, t2 = tokens
    _rls_user_id.reset(t1)
    _rls_role.reset(t2)


def get_rls_user_id() -> Optional[int]:
    return _rls_user_id.get()


def get_rls_role() -> Optional[str]:
    return _rls_role.get()
