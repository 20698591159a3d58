# app/api/auth/schema_auth.py
from typing import Optional

from pydantic import BaseModel, ConfigDict


class LoginRequest(BaseModel):
    email: str
    password: str


class CadastroClienteRequest(BaseModel):
    nome: str
    whatsapp: Optional[str] = None
    email: str
    password: str


class TokenResponse(BaseModel):
    token_type: str = "bearer"
    role: str = "user"
    access_token: str
    model_config = ConfigDict(from_attributes=True)
