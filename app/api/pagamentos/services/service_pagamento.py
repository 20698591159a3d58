from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.api.cadastros.models.user_model import UserModel
from app.api.pagamentos.repositories.repo_notificacao import NotificacaoPagamentoRepository
from app.api.pagamentos.schemas.schema_pagamento import (
    ConsultarStatusRequest,
    CriarPixRequest,
    CriarPixResponse,
    StatusPagamentoResponse,
)
from app.api.parceiros.services.service_cupom import CupomService, preco_com_desconto
from app.api.parceiros.services.service_parceiros import ParceirosService
from app.api.shared.schemas.schema_shared_enums import (
    EventoWebhookEnum,
    FinalidadePagamentoEnum,
    PagamentoStatusEnum,
)
from app.api.submissoes.models.model_submissao import SubmissaoModel
from app.api.submissoes.repositories.repo_submissao import SubmissaoRepository
from app.integrations.mercadopago.client import MercadoPagoClient, MercadoPagoError, MercadoPagoPayment
from app.integrations.webhooks.client import WebhookNotifier
from app.utils.logger import logger
from app.utils.prometheus_metrics import record_pix_cobranca, record_pix_consulta
from app.utils.validadores import (
    email_valido,
    normalizar_cupom,
    url_valida,
    whatsapp_minimo_valido,
    whatsapp_valido,
)

# PIX vencido chega como cancelled com status_detail=expired
STATUS_DETAIL_EXPIRADO = "expired"


class PagamentoService:
    def __init__(
        self,
        db: Session,
        mp_client: Optional[MercadoPagoClient],
        notifier: WebhookNotifier,
    ):
        self.db = db
        self.mp_client = mp_client
        self.notifier = notifier
        self.repo_submissao = SubmissaoRepository(db)
        self.repo_notificacao = NotificacaoPagamentoRepository(db)

    def _exigir_client(self) -> MercadoPagoClient:
        if self.mp_client is None:
            logger.error("[Pagamentos] MERCADOPAGO_ACCESS_TOKEN não configurado")
            raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "Configuração de pagamento ausente")
        return self.mp_client

    # ---------------- CRIAÇÃO ----------------
    async def criar_pix(
        self,
        payload: CriarPixRequest,
        idempotency_key: Optional[str] = None,
        user: Optional[UserModel] = None,
    ) -> CriarPixResponse:
        nome = (payload.nome or "").strip()
        email = (payload.email or "").strip().lower()
        whatsapp = (payload.whatsapp or "").strip()
        analise = payload.finalidade == FinalidadePagamentoEnum.ANALISE

        if len(nome) < 2 or len(nome) > 100:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Nome deve ter entre 2 e 100 caracteres")
        if not email_valido(email):
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "E-mail inválido")

        desconto = Decimal("0.00")
        cupom_aplicado = None
        if analise:
            if not whatsapp_valido(whatsapp):
                raise HTTPException(status.HTTP_400_BAD_REQUEST, "WhatsApp inválido. Use formato: (11) 99999-9999")
            if not url_valida(payload.url):
                raise HTTPException(status.HTTP_400_BAD_REQUEST, "URL inválida")
            if normalizar_cupom(payload.cupom):
                cupom = CupomService(self.db).resolver(payload.cupom)
                desconto = cupom.desconto
                cupom_aplicado = cupom.codigo
            valor = preco_com_desconto(desconto)
            descricao = f"Teste de Segurança - SecScan: {payload.url.strip()}"
        else:
            if not whatsapp_minimo_valido(whatsapp):
                raise HTTPException(status.HTTP_400_BAD_REQUEST, "WhatsApp inválido")
            config = ParceirosService(self.db).obter_configuracao("parceiro")
            if not config.cadastro_habilitado:
                raise HTTPException(status.HTTP_403_FORBIDDEN, "Cadastro de parceiros está desabilitado no momento")
            valor = Decimal(config.valor_cadastro).quantize(Decimal("0.01"))
            descricao = "Cadastro de Parceiro - SecScan"

        client = self._exigir_client()
        primeiro_nome, _, sobrenome = nome.partition(" ")
        try:
            payment = await client.create_pix_payment(
                amount=valor,
                descricao=descricao,
                payer={"email": email, "first_name": primeiro_nome, "last_name": sobrenome or primeiro_nome},
                external_reference=f"{payload.finalidade.value}:{uuid.uuid4().hex[:12]}",
                metadata={
                    "finalidade": payload.finalidade.value,
                    "cupom": cupom_aplicado,
                    "whatsapp": whatsapp,
                },
                idempotency_key=idempotency_key,
            )
        except MercadoPagoError as e:
            record_pix_cobranca(payload.finalidade.value, "erro")
            logger.error(f"[Pagamentos] Mercado Pago recusou a cobrança ({e.status_code}): {e.message}")
            raise HTTPException(status.HTTP_502_BAD_GATEWAY, e.message)

        record_pix_cobranca(payload.finalidade.value, "sucesso")
        logger.info(
            f"[Pagamentos] PIX criado payment_id={payment.id} finalidade={payload.finalidade.value} "
            f"valor={valor} cupom={cupom_aplicado}"
        )

        submissao_id = None
        if analise:
            submissao = self.repo_submissao.get_by_payment_id(payment.id)
            if submissao is None:
                # Mesma idempotency key devolve o mesmo pagamento: reaproveita a submissão
                submissao = self.repo_submissao.create(SubmissaoModel(
                    nome=nome,
                    email=email,
                    whatsapp=whatsapp,
                    url=payload.url.strip(),
                    valor=valor,
                    cupom=cupom_aplicado,
                    payment_id=payment.id,
                    # approved só via consultar_status, que grava a comissão do cupom
                    payment_status=PagamentoStatusEnum.PENDING.value,
                    user_id=user.id if user else None,
                ))
                self.db.commit()
            submissao_id = submissao.id

        return CriarPixResponse(
            payment_id=payment.id,
            status=payment.status,
            qr_code=payment.qr_code,
            qr_code_base64=payment.qr_code_base64,
            valor=valor,
            desconto=desconto,
            cupom_aplicado=cupom_aplicado,
            submissao_id=submissao_id,
        )

    # ---------------- CONSULTA ----------------
    async def consultar_status(self, payload: ConsultarStatusRequest) -> StatusPagamentoResponse:
        if not payload.payment_id:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "payment_id é obrigatório")

        client = self._exigir_client()
        try:
            payment = await client.get_payment(payload.payment_id)
        except MercadoPagoError as e:
            logger.error(f"[Pagamentos] Falha ao consultar {payload.payment_id} ({e.status_code}): {e.message}")
            raise HTTPException(status.HTTP_502_BAD_GATEWAY, "Falha ao consultar status do pagamento")

        record_pix_consulta(payment.status)
        logger.info(
            f"[Pagamentos] Status payment_id={payment.id} status={payment.status} detail={payment.status_detail}"
        )

        submissao = self.repo_submissao.get_by_payment_id(payment.id)

        if payment.status == PagamentoStatusEnum.APPROVED.value:
            if submissao is not None:
                self._aprovar_submissao(submissao)
            await self._notificar(EventoWebhookEnum.PAGAMENTO_CONFIRMADO, payment, submissao, payload)

        elif (
            payment.status == PagamentoStatusEnum.CANCELLED.value
            or payment.status_detail == STATUS_DETAIL_EXPIRADO
        ):
            if submissao is not None and self.repo_submissao.atualizar_status_pagamento(payment.id, payment.status):
                self.db.commit()
            await self._notificar(EventoWebhookEnum.PAGAMENTO_EXPIRADO, payment, submissao, payload)

        elif submissao is not None and self.repo_submissao.atualizar_status_pagamento(payment.id, payment.status):
            self.db.commit()

        return StatusPagamentoResponse(
            payment_id=payment.id,
            status=payment.status,
            status_detail=payment.status_detail,
        )

    def _aprovar_submissao(self, submissao: SubmissaoModel) -> None:
        """pending -> approved e comissão do cupom na mesma transação."""
        if not self.repo_submissao.marcar_aprovado(submissao.payment_id):
            return
        self.db.refresh(submissao)
        CupomService(self.db).registrar_atribuicao(submissao)
        self.db.commit()
        logger.info(f"[Pagamentos] Submissão {submissao.id} aprovada (payment_id={submissao.payment_id})")

    async def _notificar(
        self,
        evento: EventoWebhookEnum,
        payment: MercadoPagoPayment,
        submissao: Optional[SubmissaoModel],
        payload: ConsultarStatusRequest,
    ) -> None:
        dados = self._dados_cliente(submissao, payload)
        if not dados["nome"] or not dados["whatsapp"]:
            logger.info(f"[Pagamentos] {evento.value} sem dados do cliente para payment_id={payment.id}; webhook ignorado")
            return

        if not self.repo_notificacao.reservar(payment.id, evento.value):
            logger.info(f"[Pagamentos] {evento.value} já notificado para payment_id={payment.id}")
            return

        await self.notifier.enviar(evento.value, {
            "tipo": evento.value,
            "nome": dados["nome"],
            "whatsapp": dados["whatsapp"],
            "valor": dados["valor"],
            "cupom_utilizado": dados["cupom"],
            "payment_id": payment.id,
            "status": payment.status,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    @staticmethod
    def _dados_cliente(submissao: Optional[SubmissaoModel], payload: ConsultarStatusRequest) -> Dict[str, Any]:
        if submissao is not None:
            return {
                "nome": submissao.nome,
                "whatsapp": submissao.whatsapp,
                "valor": float(submissao.valor),
                "cupom": submissao.cupom,
            }
        return {
            "nome": payload.cliente_nome,
            "whatsapp": payload.cliente_whatsapp,
            "valor": float(payload.valor) if payload.valor is not None else None,
            "cupom": normalizar_cupom(payload.cupom_usado),
        }
