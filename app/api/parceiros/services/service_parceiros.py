from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.cadastros.models.user_model import UserModel
from app.api.cadastros.schemas.schema_usuario import UserCreate
from app.api.cadastros.services.usuario_service import UserService
from app.api.parceiros.models.model_parceiros import (
    ConfiguracaoCadastroModel,
    MasterParceiroModel,
    ParceiroModel,
)
from app.api.parceiros.repositories.repo_parceiros import (
    ConfiguracaoCadastroRepository,
    ParceirosRepository,
)
from app.api.parceiros.schemas.schema_parceiros import (
    CadastroMasterRequest,
    CadastroMasterResponse,
    CadastroParceiroRequest,
    CadastroParceiroResponse,
    ConfiguracaoCadastroUpdate,
    PainelMasterOut,
    PainelParceiroOut,
    TotaisComissaoOut,
)
from app.config import settings
from app.integrations.mercadopago.client import MercadoPagoClient, MercadoPagoError
from app.utils.logger import logger
from app.utils.validadores import (
    MSG_SENHA_FRACA,
    cpf_valido,
    cupom_formato_valido,
    email_valido,
    normalizar_cupom,
    senha_forte,
    somente_digitos,
    url_valida,
    whatsapp_minimo_valido,
)

MSG_CUPOM_FORMATO = "Cupom deve ter entre 3 e 20 caracteres (apenas letras e números)"
MSG_CUPOM_EM_USO = "Este código de cupom já está em uso"


def _totais(registros, campo: str = "commission_value") -> TotaisComissaoOut:
    a_receber = sum((getattr(r, campo) for r in registros if r.payment_status == "pending"), Decimal("0.00"))
    recebido = sum((getattr(r, campo) for r in registros if r.payment_status == "paid"), Decimal("0.00"))
    return TotaisComissaoOut(quantidade=len(registros), a_receber=a_receber, recebido=recebido)


class ParceirosService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ParceirosRepository(db)
        self.repo_config = ConfiguracaoCadastroRepository(db)

    # ---------------- CONFIGURAÇÕES ----------------
    def obter_configuracao(self, tipo: str) -> ConfiguracaoCadastroModel:
        config = self.repo_config.get(tipo)
        if config:
            return config
        valor = settings.VALOR_CADASTRO_PARCEIRO if tipo == "parceiro" else Decimal("0.00")
        config = ConfiguracaoCadastroModel(tipo=tipo, cadastro_habilitado=True, valor_cadastro=valor)
        self.db.add(config)
        self.db.flush()
        return config

    def atualizar_configuracao(self, tipo: str, data: ConfiguracaoCadastroUpdate) -> ConfiguracaoCadastroModel:
        if tipo not in ("parceiro", "master"):
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Configuração não encontrada")
        config = self.obter_configuracao(tipo)
        for key, value in data.model_dump(exclude_none=True).items():
            setattr(config, key, value)
        self.db.commit()
        self.db.refresh(config)
        logger.info(f"[Parceiros] Configuração de cadastro '{tipo}' atualizada: {data.model_dump(exclude_none=True)}")
        return config

    # ---------------- CADASTRO PARCEIRO ----------------
    async def cadastrar_parceiro(
        self,
        body: CadastroParceiroRequest,
        mp_client: Optional[MercadoPagoClient],
    ) -> CadastroParceiroResponse:
        if not self.obter_configuracao("parceiro").cadastro_habilitado:
            raise HTTPException(status.HTTP_403_FORBIDDEN, "Cadastro de parceiros está desabilitado no momento")

        nome = (body.nome or "").strip()
        if len(nome) < 2:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Nome deve ter no mínimo 2 caracteres")
        if not cpf_valido(body.cpf):
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "CPF inválido")
        if not whatsapp_minimo_valido(body.whatsapp):
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "WhatsApp inválido")
        pix_key = (body.pix_key or "").strip()
        if len(pix_key) < 3:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Chave PIX inválida")

        cupom = normalizar_cupom(body.coupon_code)
        if not cupom_formato_valido(cupom):
            raise HTTPException(status.HTTP_400_BAD_REQUEST, MSG_CUPOM_FORMATO)
        if not senha_forte(body.password):
            raise HTTPException(status.HTTP_400_BAD_REQUEST, MSG_SENHA_FRACA)
        if not email_valido(body.email):
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "E-mail inválido")

        cpf = somente_digitos(body.cpf)
        if self.repo.get_parceiro_by_cpf(cpf):
            raise HTTPException(status.HTTP_409_CONFLICT, "CPF já cadastrado")

        cupom_master = normalizar_cupom(body.master_coupon)
        if cupom_master and cupom == cupom_master:
            raise HTTPException(
                status.HTTP_400_BAD_REQUEST,
                "Você não pode usar o cupom do Parceiro Master como seu próprio cupom. Crie um código único para você.",
            )
        if self.repo.get_parceiro_by_coupon(cupom):
            raise HTTPException(status.HTTP_409_CONFLICT, "Este código de cupom já está em uso por outro parceiro")
        if self.repo.get_master_by_coupon(cupom):
            raise HTTPException(status.HTTP_409_CONFLICT, MSG_CUPOM_EM_USO)
        if cupom in settings.CUPONS_SISTEMA:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Este código de cupom não pode ser utilizado")

        master = self.repo.get_master_by_coupon(cupom_master) if cupom_master else None
        pagamento_id = None
        if master is None:
            # Sem cupom master válido a taxa de cadastro precisa estar paga
            pagamento_id = await self._verificar_pagamento_cadastro(body.payment_id, mp_client)

        user = UserService(self.db).create_user(
            UserCreate(email=body.email, password=body.password, nome=nome, whatsapp=somente_digitos(body.whatsapp))
        )
        parceiro = ParceiroModel(
            user_id=user.id,
            nome=nome,
            cpf=cpf,
            whatsapp=somente_digitos(body.whatsapp),
            pix_key=pix_key,
            coupon_code=cupom,
            master_parceiro_id=master.id if master else None,
            pagamento_id=pagamento_id,
        )
        try:
            self.repo.add(parceiro)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"[Parceiros] Conflito ao gravar parceiro: {e.orig}")
            raise HTTPException(status.HTTP_409_CONFLICT, MSG_CUPOM_EM_USO)

        logger.info(
            f"[Parceiros] Parceiro cadastrado parceiro_id={parceiro.id} cupom={cupom} "
            f"master_id={parceiro.master_parceiro_id}"
        )
        return CadastroParceiroResponse(
            message="Parceiro cadastrado com sucesso",
            used_master_coupon=master is not None,
        )

    async def _verificar_pagamento_cadastro(
        self,
        payment_id: Optional[str],
        mp_client: Optional[MercadoPagoClient],
    ) -> str:
        payment_id = (payment_id or "").strip()
        if not payment_id:
            raise HTTPException(
                status.HTTP_400_BAD_REQUEST,
                "Pagamento é obrigatório para registro sem cupom de Parceiro Master",
            )
        if self.repo.get_parceiro_by_pagamento(payment_id):
            raise HTTPException(status.HTTP_409_CONFLICT, "Este pagamento já foi utilizado em outro cadastro")

        if mp_client is None:
            logger.error("[Parceiros] MERCADOPAGO_ACCESS_TOKEN não configurado")
            raise HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "Configuração de pagamento ausente")

        try:
            payment = await mp_client.get_payment(payment_id)
        except MercadoPagoError as e:
            logger.error(f"[Parceiros] Erro ao consultar pagamento {payment_id}: {e.message}")
            raise HTTPException(status.HTTP_502_BAD_GATEWAY, "Não foi possível verificar o pagamento")

        if payment.status != "approved":
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Pagamento não foi confirmado")

        finalidade = (payment.raw.get("metadata") or {}).get("finalidade")
        if finalidade and finalidade != "cadastro_parceiro":
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Pagamento não corresponde à taxa de cadastro de parceiro")
        return payment_id

    # ---------------- CADASTRO MASTER ----------------
    def cadastrar_master(self, body: CadastroMasterRequest) -> CadastroMasterResponse:
        if not self.obter_configuracao("master").cadastro_habilitado:
            raise HTTPException(status.HTTP_403_FORBIDDEN, "Cadastro de Parceiro Master não está mais disponível")

        if not all([body.nome, body.cpf, body.whatsapp, body.email, body.password, body.coupon_code]):
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Todos os campos são obrigatórios")

        nome = body.nome.strip()
        if len(nome) < 2:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Nome deve ter no mínimo 2 caracteres")
        if not cpf_valido(body.cpf):
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "CPF inválido")
        if not whatsapp_minimo_valido(body.whatsapp):
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "WhatsApp inválido")
        if not senha_forte(body.password):
            raise HTTPException(status.HTTP_400_BAD_REQUEST, MSG_SENHA_FRACA)

        cupom = normalizar_cupom(body.coupon_code)
        if not cupom_formato_valido(cupom):
            raise HTTPException(status.HTTP_400_BAD_REQUEST, MSG_CUPOM_FORMATO)
        if cupom in settings.CUPONS_SISTEMA:
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "Este código de cupom não pode ser utilizado")
        if self.repo.coupon_em_uso(cupom):
            raise HTTPException(status.HTTP_409_CONFLICT, MSG_CUPOM_EM_USO)

        cpf = somente_digitos(body.cpf)
        if self.repo.get_master_by_cpf(cpf):
            raise HTTPException(status.HTTP_409_CONFLICT, "CPF já cadastrado")

        user = UserService(self.db).create_user(
            UserCreate(email=body.email, password=body.password, nome=nome, whatsapp=somente_digitos(body.whatsapp)),
            role="master_partner",
        )
        master = MasterParceiroModel(
            user_id=user.id,
            nome=nome,
            cpf=cpf,
            whatsapp=somente_digitos(body.whatsapp),
            email=user.email,
            coupon_code=cupom,
        )
        try:
            self.repo.add(master)
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"[Parceiros] Conflito ao gravar parceiro master: {e.orig}")
            raise HTTPException(status.HTTP_409_CONFLICT, MSG_CUPOM_EM_USO)

        # O cadastro master fecha após o primeiro; o update condicional barra corridas
        if not self.repo_config.desabilitar_se_habilitado("master"):
            self.db.rollback()
            raise HTTPException(status.HTTP_403_FORBIDDEN, "Cadastro de Parceiro Master não está mais disponível")
        self.db.commit()

        logger.info(f"[Parceiros] Parceiro master cadastrado master_id={master.id}; cadastro master desabilitado")
        return CadastroMasterResponse(user_id=user.id)

    # ---------------- PAINÉIS ----------------
    def painel_parceiro(self, user: UserModel) -> PainelParceiroOut:
        parceiro = self.repo.get_parceiro_by_user(user.id)
        if not parceiro:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Parceiro não encontrado")
        vendas = list(parceiro.vendas)
        return PainelParceiroOut(parceiro=parceiro, vendas=vendas, totais=_totais(vendas))

    def painel_master(self, user: UserModel) -> PainelMasterOut:
        master = self.repo.get_master_by_user(user.id)
        if not master:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Parceiro Master não encontrado")
        usos = list(master.usos_cupom)
        indicados = self.repo.list_parceiros_by_master(master.id)
        vendas_indiretas = self.repo.list_vendas_by_parceiros([p.id for p in indicados])
        return PainelMasterOut(
            master=master,
            usos_cupom=usos,
            parceiros_indicados=indicados,
            vendas_indiretas=vendas_indiretas,
            totais_diretos=_totais(usos),
            totais_indiretos=_totais(vendas_indiretas, campo="master_commission_value"),
        )

    # ---------------- ADMIN ----------------
    def listar_parceiros(self) -> List[ParceiroModel]:
        return self.repo.list_parceiros()

    def listar_masters(self) -> List[MasterParceiroModel]:
        return self.repo.list_masters()

    def listar_vendas(self, status_pagamento: Optional[str] = None):
        return self.repo.list_vendas(status_pagamento)

    def listar_usos_master(self, status_pagamento: Optional[str] = None):
        return self.repo.list_usos_master(status_pagamento)

    def _validar_comprovante(self, comprovante_url: Optional[str]) -> None:
        if comprovante_url and not url_valida(comprovante_url):
            raise HTTPException(status.HTTP_400_BAD_REQUEST, "URL do comprovante inválida")

    def marcar_venda_paga(self, venda_id: int, comprovante_url: Optional[str]):
        self._validar_comprovante(comprovante_url)
        venda = self.repo.get_venda(venda_id)
        if not venda:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Venda não encontrada")
        if not self.repo.marcar_venda_paga(venda_id, comprovante_url):
            raise HTTPException(status.HTTP_409_CONFLICT, "Comissão já foi paga")
        self.db.commit()
        self.db.refresh(venda)
        logger.info(f"[Parceiros] Comissão da venda {venda_id} marcada como paga")
        return venda

    def marcar_uso_master_pago(self, uso_id: int, comprovante_url: Optional[str]):
        self._validar_comprovante(comprovante_url)
        uso = self.repo.get_uso_master(uso_id)
        if not uso:
            raise HTTPException(status.HTTP_404_NOT_FOUND, "Uso de cupom não encontrado")
        if not self.repo.marcar_uso_master_pago(uso_id, comprovante_url):
            raise HTTPException(status.HTTP_409_CONFLICT, "Comissão já foi paga")
        self.db.commit()
        self.db.refresh(uso)
        logger.info(f"[Parceiros] Comissão do uso master {uso_id} marcada como paga")
        return uso
