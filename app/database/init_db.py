import logging

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from .db_connection import engine, Base, SessionLocal
from app.config import settings
from app.core.security import hash_password

logger = logging.getLogger(__name__)


def importar_models():
    # Registra todos os models no Base antes do create_all
    from app.api.cadastros.models.user_model import UserModel
    from app.api.submissoes.models.model_submissao import SubmissaoModel
    from app.api.parceiros.models.model_parceiros import (
        ConfiguracaoCadastroModel,
        MasterParceiroModel,
        ParceiroModel,
        UsoCupomMasterModel,
        VendaParceiroModel,
    )
    from app.api.pagamentos.models.model_notificacao_pagamento import NotificacaoPagamentoModel
    from app.api.recuperacao_senha.models.model_codigo_recuperacao import CodigoRecuperacaoModel

    logger.info("✅ Models importados.")


def configurar_timezone():
    """Configura o timezone da sessão para America/Sao_Paulo (somente Postgres)."""
    if engine.dialect.name != "postgresql":
        return
    try:
        with engine.begin() as conn:
            conn.execute(text("SET timezone = 'America/Sao_Paulo'"))
            timezone_atual = conn.execute(text("SHOW timezone")).scalar()
            logger.info(f"✅ Timezone do banco configurado: {timezone_atual}")
    except Exception as e:
        logger.warning(f"⚠️ Erro ao configurar timezone do banco: {e}")


def criar_tabelas():
    importar_models()
    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.info("✅ Tabelas criadas/verificadas.")


def criar_configuracoes_cadastro_padrao(db=None):
    """Uma linha por tipo de cadastro (parceiro e master), habilitados por padrão."""
    from app.api.parceiros.models.model_parceiros import ConfiguracaoCadastroModel

    padroes = {
        "parceiro": settings.VALOR_CADASTRO_PARCEIRO,
        "master": 0,
    }
    session = db or SessionLocal()
    try:
        for tipo, valor in padroes.items():
            existe = (
                session.query(ConfiguracaoCadastroModel)
                .filter(ConfiguracaoCadastroModel.tipo == tipo)
                .first()
            )
            if not existe:
                session.add(ConfiguracaoCadastroModel(tipo=tipo, cadastro_habilitado=True, valor_cadastro=valor))
        session.commit()
        logger.info("✅ Configurações de cadastro criadas/verificadas.")
    except IntegrityError:
        # Outra instância da API semeou ao mesmo tempo
        session.rollback()
    finally:
        if db is None:
            session.close()


def criar_usuario_admin_padrao(db=None):
    """Cria o admin inicial a partir de ADMIN_EMAIL/ADMIN_PASSWORD, se configurados."""
    from app.api.cadastros.models.user_model import UserModel

    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        logger.info("ℹ️ ADMIN_EMAIL/ADMIN_PASSWORD não definidos; admin inicial não será criado.")
        return

    email = settings.ADMIN_EMAIL.strip().lower()
    session = db or SessionLocal()
    try:
        if session.query(UserModel).filter(UserModel.email == email).first():
            return
        session.add(UserModel(
            email=email,
            hashed_password=hash_password(settings.ADMIN_PASSWORD),
            nome="Administrador",
            role="admin",
        ))
        session.commit()
        logger.info("✅ Usuário admin inicial criado.")
    except IntegrityError:
        session.rollback()
    finally:
        if db is None:
            session.close()


def inicializar_banco():
    logger.info("🚀 Iniciando processo de inicialização do banco de dados...")

    logger.info("📦 Passo 1/4: Configurando timezone do banco...")
    configurar_timezone()

    logger.info("📋 Passo 2/4: Criando/verificando todas as tabelas...")
    criar_tabelas()

    logger.info("⚙️ Passo 3/4: Criando/verificando configurações de cadastro...")
    criar_configuracoes_cadastro_padrao()

    logger.info("🧑‍💼 Passo 4/4: Criando/verificando usuário admin...")
    criar_usuario_admin_padrao()

    logger.info("✅ Banco inicializado com sucesso.")
