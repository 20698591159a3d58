"""
Models de Cadastros
"""

from app.api.cadastros.models.user_model import UserModel

__all__ = ["UserModel"]
