import re
from typing import Optional
from urllib.parse import urlparse

# Formatos aceitos no formulário: (11) 99999-9999, 11999999999, +55 11 99999-9999
WHATSAPP_REGEX = re.compile(r"^(\+55\s?)?\(?\d{2}\)?\s?\d{4,5}[-\s]?\d{4}$")
EMAIL_REGEX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
CUPOM_REGEX = re.compile(r"^[a-z0-9]{3,20}$")
# Mínimo 8 caracteres com maiúscula, minúscula, número e caractere especial
SENHA_FORTE_REGEX = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[^A-Za-z0-9]).{8,}$")
MSG_SENHA_FRACA = "Senha deve ter no mínimo 8 caracteres, incluindo maiúscula, minúscula, número e caractere especial"

URL_MAX_LENGTH = 500


def somente_digitos(valor: Optional[str]) -> str:
    """Remove máscara (pontos, traços, parênteses, espaços...)."""
    if valor is None:
        return ""
    return re.sub(r"\D", "", str(valor))


def cpf_valido(cpf: Optional[str]) -> bool:
    """CPF é aceito quando tem exatamente 11 dígitos após remover a pontuação."""
    return len(somente_digitos(cpf)) == 11


def whatsapp_valido(whatsapp: Optional[str]) -> bool:
    """Valida o WhatsApp no formato do formulário de análise."""
    if not whatsapp:
        return False
    return bool(WHATSAPP_REGEX.match(whatsapp.strip()))


def whatsapp_minimo_valido(whatsapp: Optional[str]) -> bool:
    """Regra mais frouxa usada nos cadastros de parceiro: DDD + número (10+ dígitos)."""
    return len(somente_digitos(whatsapp)) >= 10


def email_valido(email: Optional[str]) -> bool:
    if not email or len(email) > 255:
        return False
    return bool(EMAIL_REGEX.match(email.strip()))


def url_valida(url: Optional[str]) -> bool:
    if not url or len(url) > URL_MAX_LENGTH:
        return False
    parsed = urlparse(url.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def normalizar_cupom(cupom: Optional[str]) -> Optional[str]:
    """Cupons são comparados sempre em minúsculas e sem espaços nas pontas."""
    if cupom is None:
        return None
    normalizado = cupom.strip().lower()
    return normalizado or None


def cupom_formato_valido(cupom: Optional[str]) -> bool:
    return bool(cupom) and bool(CUPOM_REGEX.match(cupom))


def senha_forte(senha: Optional[str]) -> bool:
    return bool(senha) and bool(SENHA_FORTE_REGEX.match(senha))
