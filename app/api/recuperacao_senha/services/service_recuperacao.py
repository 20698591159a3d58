from __future__ import annotations

import secrets
import string
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.api.cadastros.repositories.usuarios_repo import UsuarioRepository
from app.api.recuperacao_senha.models.model_codigo_recuperacao import CodigoRecuperacaoModel
from app.api.recuperacao_senha.repositories.repo_codigo_recuperacao import CodigoRecuperacaoRepository
from app.api.recuperacao_senha.schemas.schema_recuperacao import (
    MensagemResponse,
    RedefinirSenhaRequest,
    SolicitarRecuperacaoRequest,
    VerificarCodigoRequest,
    VerificarCodigoResponse,
)
from app.api.shared.schemas.schema_shared_enums import EventoWebhookEnum
from app.config import settings
from app.core.security import hash_password
from app.integrations.webhooks.client import WebhookNotifier
from app.utils.database_utils import now_plus
from app.utils.logger import logger

ALFABETO_CODIGO = string.ascii_uppercase + string.digits
TAMANHO_CODIGO = 8
MSG_SOLICITACAO = "Se o e-mail existir, você receberá um código de recuperação."


def gerar_codigo() -> str:
    return "".join(secrets.choice(ALFABETO_CODIGO) for _ in range(TAMANHO_CODIGO))


class RecuperacaoSenhaService:
    def __init__(self, db: Session, notifier: WebhookNotifier):
        self.db = db
        self.notifier = notifier
        self.repo = CodigoRecuperacaoRepository(db)
        self.repo_usuario = UsuarioRepository(db)

    async def solicitar(self, body: SolicitarRecuperacaoRequest) -> MensagemResponse:
        """
        Sempre responde a mesma mensagem, exista ou não o e-mail.
        Quando existe, gera o código e envia pelo webhook de automação (WhatsApp).
        """
        email = (body.email or "").strip().lower()
        if not email:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "E-mail é obrigatório")

        user = self.repo_usuario.get_by_email(email)
        if not user:
            logger.info("[Recuperacao] Solicitação para e-mail não cadastrado")
            return MensagemResponse(message=MSG_SOLICITACAO)

        self.repo.invalidar_anteriores(user.id)
        codigo = gerar_codigo()
        self.repo.create(CodigoRecuperacaoModel(
            user_id=user.id,
            email=email,
            code=codigo,
            attempts=0,
            max_attempts=settings.RECUPERACAO_MAX_TENTATIVAS,
            expires_at=now_plus(settings.RECUPERACAO_EXPIRACAO_MINUTOS),
            used=False,
        ))
        self.db.commit()
        logger.info(f"[Recuperacao] Código gerado para user_id={user.id}")

        await self.notifier.enviar(EventoWebhookEnum.RECUPERACAO_SENHA.value, {
            "codigo": codigo,
            "nome_cliente": user.nome or "Cliente",
            "whatsapp": user.whatsapp or "",
            "email": email,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })
        return MensagemResponse(message=MSG_SOLICITACAO)

    def verificar(self, body: VerificarCodigoRequest) -> VerificarCodigoResponse:
        email = (body.email or "").strip().lower()
        code = (body.code or "").strip()
        if not email or not code:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "E-mail e código são obrigatórios")

        registro = self.repo.get_ultimo_valido(email)
        if not registro:
            raise HTTPException(
                status.HTTP_400_BAD_REQUEST,
                "Código expirado ou inválido. Solicite um novo código.",
            )

        if registro.attempts >= registro.max_attempts:
            self.repo.marcar_usado(registro)
            self.db.commit()
            logger.warning(f"[Recuperacao] Limite de tentativas atingido recovery_id={registro.id}")
            raise HTTPException(status.HTTP_400_BAD_REQUEST, {
                "error": "Limite de tentativas excedido. Solicite um novo código.",
                "attempts_exceeded": True,
            })

        if not secrets.compare_digest(registro.code.encode(), code.upper().encode()):
            self.repo.incrementar_tentativas(registro)
            self.db.commit()
            restantes = max(registro.max_attempts - registro.attempts, 0)
            raise HTTPException(status.HTTP_400_BAD_REQUEST, {
                "error": f"Código incorreto. {restantes} tentativa(s) restante(s).",
                "remaining_attempts": restantes,
            })

        logger.info(f"[Recuperacao] Código verificado recovery_id={registro.id}")
        return VerificarCodigoResponse(user_id=registro.user_id, recovery_id=registro.id)

    def redefinir(self, body: RedefinirSenhaRequest) -> MensagemResponse:
        if not body.user_id or not body.recovery_id or not body.new_password:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Dados incompletos")
        if len(body.new_password) < 8:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "A senha deve ter no mínimo 8 caracteres")

        registro = self.repo.get_valido(body.recovery_id, body.user_id)
        user = self.repo_usuario.get(body.user_id) if registro else None
        if not registro or not user or not self.repo.marcar_usado(registro):
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Código de recuperação inválido ou expirado")

        self.repo_usuario.update_password(user, hash_password(body.new_password))
        self.db.commit()
        logger.info(f"[Recuperacao] Senha redefinida user_id={user.id}")
        return MensagemResponse(message="Senha alterada com sucesso!")
