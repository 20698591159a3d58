"""SecScan: schema inicial (usuários, submissões, parceiros, comissões, recuperação) + RLS

Revision ID: 20261019_secscan_schema_inicial
Revises: 
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_secscan_schema_inicial"
down_revision = None
branch_labels = None
depends_on = None

app_role_enum = sa.Enum("admin", "user", "master_partner", name="app_role_enum")
status_analise_enum = sa.Enum("pendente", "seguro", "vulneravel", name="status_analise_enum")
status_contato_enum = sa.Enum("pendente", "em_contato", "resolvido", name="status_contato_enum")
status_comissao_enum = sa.Enum("pending", "paid", name="status_comissao_enum")
tipo_cadastro_enum = sa.Enum("parceiro", "master", name="tipo_cadastro_enum")

# Expressões usadas pelas políticas: o get_db publica app.user_id / app.role por transação
CURRENT_USER_ID = "nullif(current_setting('app.user_id', true), '')::int"
IS_ADMIN = "coalesce(current_setting('app.role', true), '') = 'admin'"

# Tabelas com dono (user_id) e a expressão que identifica o dono da linha
TABELAS_RLS = {
    "usuarios": f"id = {CURRENT_USER_ID}",
    "submissoes": f"user_id = {CURRENT_USER_ID}",
    "parceiros": f"user_id = {CURRENT_USER_ID}",
    "master_parceiros": f"user_id = {CURRENT_USER_ID}",
    "vendas_parceiros": (
        f"parceiro_id IN (SELECT id FROM parceiros WHERE user_id = {CURRENT_USER_ID})"
        f" OR parceiro_id IN (SELECT p.id FROM parceiros p JOIN master_parceiros m"
        f" ON m.id = p.master_parceiro_id WHERE m.user_id = {CURRENT_USER_ID})"
    ),
    "usos_cupom_master": (
        f"master_parceiro_id IN (SELECT id FROM master_parceiros WHERE user_id = {CURRENT_USER_ID})"
    ),
}


def upgrade() -> None:
    op.create_table(
        "usuarios",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True, index=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", app_role_enum, nullable=False, server_default="user"),
        sa.Column("nome", sa.String(100), nullable=True),
        sa.Column("whatsapp", sa.String(20), nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime, server_default=sa.text("now()"), nullable=False),
    )

    op.create_table(
        "submissoes",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("nome", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, index=True),
        sa.Column("whatsapp", sa.String(20), nullable=False),
        sa.Column("url", sa.String(500), nullable=False),
        sa.Column("status_analise", status_analise_enum, nullable=False, server_default="pendente"),
        sa.Column("status_contato", status_contato_enum, nullable=False, server_default="pendente"),
        sa.Column("payment_status", sa.String(30), nullable=False, server_default="pending"),
        sa.Column("payment_id", sa.String(64), nullable=True, unique=True, index=True),
        sa.Column("valor", sa.Numeric(10, 2), nullable=False),
        sa.Column("cupom", sa.String(20), nullable=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("usuarios.id", ondelete="SET NULL"), nullable=True, index=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime, server_default=sa.text("now()"), nullable=False),
    )

    op.create_table(
        "master_parceiros",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("nome", sa.String(100), nullable=False),
        sa.Column("cpf", sa.String(11), nullable=False, unique=True),
        sa.Column("whatsapp", sa.String(20), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("coupon_code", sa.String(20), nullable=False, unique=True, index=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime, server_default=sa.text("now()"), nullable=False),
    )

    op.create_table(
        "parceiros",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("nome", sa.String(100), nullable=False),
        sa.Column("cpf", sa.String(11), nullable=False, unique=True),
        sa.Column("whatsapp", sa.String(20), nullable=False),
        sa.Column("pix_key", sa.String(140), nullable=False),
        sa.Column("coupon_code", sa.String(20), nullable=False, unique=True, index=True),
        sa.Column("master_parceiro_id", sa.Integer, sa.ForeignKey("master_parceiros.id", ondelete="SET NULL"), nullable=True),
        sa.Column("pagamento_id", sa.String(64), nullable=True, unique=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime, server_default=sa.text("now()"), nullable=False),
    )

    # Cupom é único entre parceiros e masters (as unique constraints cobrem cada tabela)
    op.execute(
        """
        CREATE OR REPLACE FUNCTION secscan_cupom_unico() RETURNS trigger AS $$
        BEGIN
            IF TG_TABLE_NAME = 'parceiros' AND EXISTS (SELECT 1 FROM master_parceiros WHERE coupon_code = NEW.coupon_code) THEN
                RAISE EXCEPTION 'coupon_code % já usado por parceiro master', NEW.coupon_code USING ERRCODE = 'unique_violation';
            END IF;
            IF TG_TABLE_NAME = 'master_parceiros' AND EXISTS (SELECT 1 FROM parceiros WHERE coupon_code = NEW.coupon_code) THEN
                RAISE EXCEPTION 'coupon_code % já usado por parceiro', NEW.coupon_code USING ERRCODE = 'unique_violation';
            END IF;
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
        """
    )
    for tabela in ("parceiros", "master_parceiros"):
        op.execute(
            f"CREATE TRIGGER trg_{tabela}_cupom_unico BEFORE INSERT OR UPDATE OF coupon_code ON {tabela} "
            f"FOR EACH ROW EXECUTE FUNCTION secscan_cupom_unico()"
        )

    op.create_table(
        "vendas_parceiros",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("parceiro_id", sa.Integer, sa.ForeignKey("parceiros.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("submissao_id", sa.Integer, sa.ForeignKey("submissoes.id", ondelete="SET NULL"), nullable=True, unique=True),
        sa.Column("sale_value", sa.Numeric(10, 2), nullable=False),
        sa.Column("commission_value", sa.Numeric(10, 2), nullable=False),
        sa.Column("master_commission_value", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("payment_status", status_comissao_enum, nullable=False, server_default="pending"),
        sa.Column("payment_receipt_url", sa.String(500), nullable=True),
        sa.Column("paid_at", sa.DateTime, nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.text("now()"), nullable=False),
    )

    op.create_table(
        "usos_cupom_master",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("master_parceiro_id", sa.Integer, sa.ForeignKey("master_parceiros.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("submissao_id", sa.Integer, sa.ForeignKey("submissoes.id", ondelete="SET NULL"), nullable=True, unique=True),
        sa.Column("payment_value", sa.Numeric(10, 2), nullable=False),
        sa.Column("commission_value", sa.Numeric(10, 2), nullable=False),
        sa.Column("payment_status", status_comissao_enum, nullable=False, server_default="pending"),
        sa.Column("payment_receipt_url", sa.String(500), nullable=True),
        sa.Column("paid_at", sa.DateTime, nullable=True),
        sa.Column("created_at", sa.DateTime, server_default=sa.text("now()"), nullable=False),
    )

    op.create_table(
        "codigos_recuperacao",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("email", sa.String(255), nullable=False, index=True),
        sa.Column("code", sa.String(8), nullable=False),
        sa.Column("attempts", sa.Integer, nullable=False, server_default="0"),
        sa.Column("max_attempts", sa.Integer, nullable=False, server_default="5"),
        sa.Column("expires_at", sa.DateTime, nullable=False),
        sa.Column("used", sa.Boolean, nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime, server_default=sa.text("now()"), nullable=False),
    )

    op.create_table(
        "configuracoes_cadastro",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("tipo", tipo_cadastro_enum, nullable=False, unique=True),
        sa.Column("cadastro_habilitado", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("valor_cadastro", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime, server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("valor_cadastro >= 0", name="ck_configuracoes_cadastro_valor"),
    )
    op.execute(
        "INSERT INTO configuracoes_cadastro (tipo, cadastro_habilitado, valor_cadastro) "
        "VALUES ('parceiro', true, 10.00), ('master', true, 0)"
    )

    op.create_table(
        "notificacoes_pagamento",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("payment_id", sa.String(64), nullable=False, index=True),
        sa.Column("evento", sa.String(40), nullable=False),
        sa.Column("enviado_em", sa.DateTime, server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("payment_id", "evento", name="uq_notificacoes_pagamento_evento"),
    )

    # ─── Row Level Security ───────────────────────────────────────
    # O dono da linha lê os próprios registros; admin lê e altera tudo.
    # Sem FORCE: o dono das tabelas (papel das migrations) não é afetado; papéis de
    # aplicação sem bypass recebem app.user_id/app.role do get_db a cada transação.
    for tabela, dono in TABELAS_RLS.items():
        op.execute(f"ALTER TABLE {tabela} ENABLE ROW LEVEL SECURITY")
        op.execute(f"CREATE POLICY {tabela}_select_dono ON {tabela} FOR SELECT USING ({dono} OR {IS_ADMIN})")
        op.execute(f"CREATE POLICY {tabela}_admin_all ON {tabela} FOR ALL USING ({IS_ADMIN}) WITH CHECK ({IS_ADMIN})")

    for tabela in ("codigos_recuperacao", "notificacoes_pagamento", "configuracoes_cadastro"):
        # Sem política de leitura: só o papel da API (bypass) acessa
        op.execute(f"ALTER TABLE {tabela} ENABLE ROW LEVEL SECURITY")


def downgrade() -> None:
    for tabela in TABELAS_RLS:
        op.execute(f"DROP POLICY IF EXISTS {tabela}_select_dono ON {tabela}")
        op.execute(f"DROP POLICY IF EXISTS {tabela}_admin_all ON {tabela}")

    for tabela in ("parceiros", "master_parceiros"):
        op.execute(f"DROP TRIGGER IF EXISTS trg_{tabela}_cupom_unico ON {tabela}")
    op.execute("DROP FUNCTION IF EXISTS secscan_cupom_unico()")

    op.drop_table("notificacoes_pagamento")
    op.drop_table("configuracoes_cadastro")
    op.drop_table("codigos_recuperacao")
    op.drop_table("usos_cupom_master")
    op.drop_table("vendas_parceiros")
    op.drop_table("parceiros")
    op.drop_table("master_parceiros")
    op.drop_table("submissoes")
    op.drop_table("usuarios")

    bind = op.get_bind()
    for enum in (tipo_cadastro_enum, status_comissao_enum, status_contato_enum, status_analise_enum, app_role_enum):
        enum.drop(bind, checkfirst=True)
