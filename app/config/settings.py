import os
from decimal import Decimal
from dotenv import load_dotenv
from pathlib import Path

# Carrega o .env manualmente se estiver fora do Docker
if not os.getenv("RUNNING_IN_DOCKER"):
    dotenv_path = Path(__file__).resolve().parents[2] / ".env"
    load_dotenv(dotenv_path=dotenv_path)

# Configuração de conexão
DB_CONFIG = {
    'database': os.getenv('DB_NAME'),
    'user': os.getenv('DB_USER'),
    'password': os.getenv('DB_PASSWORD'),
    'host': os.getenv('DB_HOST'),
    'port': int(os.getenv('DB_PORT', 5432)),
}

# URL completa (tem prioridade sobre DB_CONFIG). Ex.: sqlite:///./secscan.db
DATABASE_URL = os.getenv("DATABASE_URL")

# SSL do banco (opcional)
DB_SSL_MODE = os.getenv('DB_SSL_MODE')  # ex.: require, verify-ca, verify-full

# JWT / Segurança
SECRET_KEY = os.getenv("SECRET_KEY")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 90))

# CORS
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]
CORS_ALLOW_ALL = os.getenv("CORS_ALLOW_ALL", "false").lower() in ("1", "true", "yes")

# FastAPI / App
BASE_URL = os.getenv("BASE_URL", "")
ENABLE_DOCS = os.getenv("ENABLE_DOCS", "true").lower() in ("1", "true", "yes")

# Mercado Pago
MERCADOPAGO_ACCESS_TOKEN = os.getenv("MERCADOPAGO_ACCESS_TOKEN")
MERCADOPAGO_PUBLIC_KEY = os.getenv("MERCADOPAGO_PUBLIC_KEY")
MERCADOPAGO_BASE_URL = os.getenv("MERCADOPAGO_BASE_URL", "https://api.mercadopago.com")
MERCADOPAGO_TIMEOUT_SECONDS = int(os.getenv("MERCADOPAGO_TIMEOUT_SECONDS", 20))

# Webhooks de automação (n8n)
WEBHOOK_PAGAMENTO_CONFIRMADO_URL = os.getenv("WEBHOOK_PAGAMENTO_CONFIRMADO_URL")
WEBHOOK_PAGAMENTO_EXPIRADO_URL = os.getenv("WEBHOOK_PAGAMENTO_EXPIRADO_URL")
WEBHOOK_RECUPERACAO_SENHA_URL = os.getenv("WEBHOOK_RECUPERACAO_SENHA_URL")
WEBHOOK_TIMEOUT_SECONDS = int(os.getenv("WEBHOOK_TIMEOUT_SECONDS", 10))

# Preços e comissões (R$)
PRECO_ANALISE = Decimal(os.getenv("PRECO_ANALISE", "19.90"))
DESCONTO_CUPOM_PARCEIRO = Decimal(os.getenv("DESCONTO_CUPOM_PARCEIRO", "5.00"))
COMISSAO_PARCEIRO = Decimal(os.getenv("COMISSAO_PARCEIRO", "5.00"))
COMISSAO_MASTER_DIRETA = Decimal(os.getenv("COMISSAO_MASTER_DIRETA", "10.00"))
COMISSAO_MASTER_INDIRETA = Decimal(os.getenv("COMISSAO_MASTER_INDIRETA", "2.50"))
DESCONTO_CUPOM_SISTEMA = Decimal(os.getenv("DESCONTO_CUPOM_SISTEMA", "10.00"))
CUPONS_SISTEMA = [c.strip().lower() for c in os.getenv("CUPONS_SISTEMA", "cupom10,10c").split(",") if c.strip()]
VALOR_CADASTRO_PARCEIRO = Decimal(os.getenv("VALOR_CADASTRO_PARCEIRO", "10.00"))

# Recuperação de senha
RECUPERACAO_EXPIRACAO_MINUTOS = int(os.getenv("RECUPERACAO_EXPIRACAO_MINUTOS", 15))
RECUPERACAO_MAX_TENTATIVAS = int(os.getenv("RECUPERACAO_MAX_TENTATIVAS", 5))

# Admin inicial (seed)
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
