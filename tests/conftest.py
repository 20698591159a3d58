import os
import tempfile

# Ambiente de teste antes de importar a aplicação (settings/engine leem no import)
os.environ["RUNNING_IN_DOCKER"] = "1"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "segredo-de-teste"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="secscan-logs-")
os.environ["MERCADOPAGO_ACCESS_TOKEN"] = ""
os.environ["MERCADOPAGO_PUBLIC_KEY"] = "TEST-public-key"
os.environ.pop("ADMIN_EMAIL", None)
os.environ.pop("ADMIN_PASSWORD", None)

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.api.cadastros.models.user_model import UserModel
from app.api.pagamentos.services.dependencies import get_mercadopago_client, get_webhook_notifier
from app.core.security import create_access_token, hash_password
from app.database.db_connection import Base, SessionLocal, engine
from app.database.init_db import criar_configuracoes_cadastro_padrao
from app.integrations.mercadopago.client import MercadoPagoError, MercadoPagoPayment


class FakeMercadoPago:
    """Mercado Pago em memória: cria cobranças PIX e devolve o status configurado pelo teste."""

    def __init__(self):
        self.payments = {}
        self.por_chave = {}
        self.cobrancas = []
        self.erro_criacao = None
        self.status_inicial = "pending"
        self._seq = 1000

    async def create_pix_payment(self, *, amount, descricao, payer, external_reference=None,
                                 metadata=None, idempotency_key=None):
        if self.erro_criacao:
            raise MercadoPagoError(self.erro_criacao, status_code=400)
        if idempotency_key and idempotency_key in self.por_chave:
            return MercadoPagoPayment.from_dict(self.payments[self.por_chave[idempotency_key]])

        self._seq += 1
        payment_id = str(self._seq)
        self.payments[payment_id] = {
            "id": int(payment_id),
            "status": self.status_inicial,
            "status_detail": "accredited" if self.status_inicial == "approved" else "pending_waiting_transfer",
            "transaction_amount": float(amount),
            "description": descricao,
            "payer": payer,
            "metadata": metadata or {},
            "point_of_interaction": {
                "transaction_data": {
                    "qr_code": f"00020126580014br.gov.bcb.pix-{payment_id}",
                    "qr_code_base64": "iVBORw0KGgoAAAANSUhEUg==",
                }
            },
        }
        if idempotency_key:
            self.por_chave[idempotency_key] = payment_id
        self.cobrancas.append(self.payments[payment_id])
        return MercadoPagoPayment.from_dict(self.payments[payment_id])

    async def get_payment(self, payment_id):
        data = self.payments.get(str(payment_id))
        if data is None:
            raise MercadoPagoError("Payment not found", status_code=404)
        return MercadoPagoPayment.from_dict(data)

    def definir_status(self, payment_id, status, status_detail=None):
        self.payments[str(payment_id)]["status"] = status
        self.payments[str(payment_id)]["status_detail"] = status_detail or status

    def adicionar_pagamento(self, payment_id, status, metadata=None):
        self.payments[str(payment_id)] = {
            "id": payment_id,
            "status": status,
            "status_detail": status,
            "metadata": metadata or {},
        }


class RecordingNotifier:
    def __init__(self):
        self.enviados = []

    async def enviar(self, evento, payload):
        self.enviados.append((evento, payload))
        return True

    def eventos(self, evento):
        return [p for e, p in self.enviados if e == evento]


@pytest.fixture(autouse=True)
def banco():
    Base.metadata.create_all(bind=engine)
    criar_configuracoes_cadastro_padrao()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def mp():
    fake = FakeMercadoPago()
    app.dependency_overrides[get_mercadopago_client] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_mercadopago_client, None)


@pytest.fixture
def notifier():
    fake = RecordingNotifier()
    app.dependency_overrides[get_webhook_notifier] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_webhook_notifier, None)


@pytest.fixture
def client(mp, notifier):
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


def criar_usuario(email, role="user", senha="Senha@123", nome="Usuário Teste"):
    with SessionLocal() as session:
        user = UserModel(email=email, hashed_password=hash_password(senha), role=role, nome=nome)
        session.add(user)
        session.commit()
        return user.id


def auth_header(user_id, role="user"):
    token = create_access_token({"sub": str(user_id), "role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers():
    user_id = criar_usuario("admin@secscan.com", role="admin")
    return auth_header(user_id, "admin")
