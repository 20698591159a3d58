# app/api/parceiros/models/model_parceiros.py
from sqlalchemy import (
    Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String,
    Enum as SAEnum,
)
from sqlalchemy.orm import relationship

from app.database.db_connection import Base
from app.utils.database_utils import now_trimmed

StatusComissao = SAEnum("pending", "paid", name="status_comissao_enum")


# ----------------------
# PARCEIRO MASTER
# ----------------------
class MasterParceiroModel(Base):
    __tablename__ = "master_parceiros"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False, index=True)
    nome = Column(String(100), nullable=False)
    cpf = Column(String(11), nullable=False, unique=True)
    whatsapp = Column(String(20), nullable=False)
    email = Column(String(255), nullable=False)
    coupon_code = Column(String(20), nullable=False, unique=True, index=True)

    created_at = Column(DateTime, default=now_trimmed, nullable=False)
    updated_at = Column(DateTime, default=now_trimmed, onupdate=now_trimmed, nullable=False)

    parceiros = relationship("ParceiroModel", back_populates="master")
    usos_cupom = relationship("UsoCupomMasterModel", back_populates="master", order_by="desc(UsoCupomMasterModel.created_at)")


# ----------------------
# PARCEIRO
# ----------------------
class ParceiroModel(Base):
    __tablename__ = "parceiros"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False, index=True)
    nome = Column(String(100), nullable=False)
    cpf = Column(String(11), nullable=False, unique=True)
    whatsapp = Column(String(20), nullable=False)
    pix_key = Column(String(140), nullable=False)
    coupon_code = Column(String(20), nullable=False, unique=True, index=True)

    master_parceiro_id = Column(Integer, ForeignKey("master_parceiros.id", ondelete="SET NULL"), nullable=True)
    # Pagamento da taxa de cadastro (um pagamento só libera um cadastro)
    pagamento_id = Column(String(64), nullable=True, unique=True)

    created_at = Column(DateTime, default=now_trimmed, nullable=False)
    updated_at = Column(DateTime, default=now_trimmed, onupdate=now_trimmed, nullable=False)

    master = relationship("MasterParceiroModel", back_populates="parceiros")
    vendas = relationship("VendaParceiroModel", back_populates="parceiro", order_by="desc(VendaParceiroModel.created_at)")


# ----------------------
# VENDAS / COMISSÕES
# ----------------------
class VendaParceiroModel(Base):
    """Venda feita com o cupom de um parceiro (comissão do parceiro + comissão indireta do master)."""

    __tablename__ = "vendas_parceiros"

    id = Column(Integer, primary_key=True, autoincrement=True)
    parceiro_id = Column(Integer, ForeignKey("parceiros.id", ondelete="CASCADE"), nullable=False, index=True)
    submissao_id = Column(Integer, ForeignKey("submissoes.id", ondelete="SET NULL"), nullable=True, unique=True)

    sale_value = Column(Numeric(10, 2), nullable=False)
    commission_value = Column(Numeric(10, 2), nullable=False)
    master_commission_value = Column(Numeric(10, 2), nullable=False, default=0)

    payment_status = Column(StatusComissao, nullable=False, default="pending")
    payment_receipt_url = Column(String(500), nullable=True)
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=now_trimmed, nullable=False)

    parceiro = relationship("ParceiroModel", back_populates="vendas")


class UsoCupomMasterModel(Base):
    """Uso direto do cupom de um parceiro master."""

    __tablename__ = "usos_cupom_master"

    id = Column(Integer, primary_key=True, autoincrement=True)
    master_parceiro_id = Column(Integer, ForeignKey("master_parceiros.id", ondelete="CASCADE"), nullable=False, index=True)
    submissao_id = Column(Integer, ForeignKey("submissoes.id", ondelete="SET NULL"), nullable=True, unique=True)

    payment_value = Column(Numeric(10, 2), nullable=False)
    commission_value = Column(Numeric(10, 2), nullable=False)

    payment_status = Column(StatusComissao, nullable=False, default="pending")
    payment_receipt_url = Column(String(500), nullable=True)
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=now_trimmed, nullable=False)

    master = relationship("MasterParceiroModel", back_populates="usos_cupom")


# ----------------------
# CONFIGURAÇÕES DE CADASTRO
# ----------------------
class ConfiguracaoCadastroModel(Base):
    __tablename__ = "configuracoes_cadastro"
    __table_args__ = (
        CheckConstraint("valor_cadastro >= 0", name="ck_configuracoes_cadastro_valor"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    tipo = Column(SAEnum("parceiro", "master", name="tipo_cadastro_enum"), nullable=False, unique=True)
    cadastro_habilitado = Column(Boolean, nullable=False, default=True)
    valor_cadastro = Column(Numeric(10, 2), nullable=False, default=0)
    updated_at = Column(DateTime, default=now_trimmed, onupdate=now_trimmed, nullable=False)
