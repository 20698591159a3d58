from typing import Optional

from pydantic import BaseModel


class SolicitarRecuperacaoRequest(BaseModel):
    email: Optional[str] = None


class VerificarCodigoRequest(BaseModel):
    email: Optional[str] = None
    code: Optional[str] = None


class RedefinirSenhaRequest(BaseModel):
    user_id: Optional[int] = None
    recovery_id: Optional[int] = None
    new_password: Optional[str] = None


class MensagemResponse(BaseModel):
    success: bool = True
    message: str


class VerificarCodigoResponse(BaseModel):
    success: bool = True
    user_id: int
    recovery_id: int
