"""
Repositories de Cadastros
"""

from app.api.cadastros.repositories.usuarios_repo import UsuarioRepository

__all__ = ["UsuarioRepository"]
