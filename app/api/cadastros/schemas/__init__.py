"""
Schemas de Cadastros (usuários)
"""

from app.api.cadastros.schemas.schema_usuario import UserCreate, UserResponse

__all__ = ["UserCreate", "UserResponse"]
