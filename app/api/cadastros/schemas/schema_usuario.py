# app/api/cadastros/schemas/schema_usuario.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class UserCreate(BaseModel):
    email: str
    password: str
    nome: Optional[str] = None
    whatsapp: Optional[str] = None


class UserResponse(BaseModel):
    id: int
    email: str
    role: str
    nome: Optional[str] = None
    whatsapp: Optional[str] = None
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
