"""
Services de Cadastros
"""

from app.api.cadastros.services.usuario_service import UserService

__all__ = ["UserService"]
