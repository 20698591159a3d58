from decimal import Decimal

from app.api.pagamentos.services.dependencies import get_mercadopago_client
from app.api.parceiros.models.model_parceiros import ParceiroModel, VendaParceiroModel, UsoCupomMasterModel
from app.api.submissoes.models.model_submissao import SubmissaoModel
from app.main import app
from tests.conftest import criar_usuario


ANA = {"nome": "Ana", "email": "ana@x.com", "url": "https://ana.dev", "whatsapp": "11999999999"}


def _parceiro(db, cupom="joao10", master_id=None):
    user_id = criar_usuario(f"{cupom}@parceiro.com")
    parceiro = ParceiroModel(
        user_id=user_id,
        nome="João",
        cpf="12345678901",
        whatsapp="11988887777",
        pix_key="joao@pix.com",
        coupon_code=cupom,
        master_parceiro_id=master_id,
    )
    db.add(parceiro)
    db.commit()
    return parceiro


def test_fluxo_completo_sem_cupom_notifica_uma_vez(client, mp, notifier, db):
    resp = client.post("/api/pagamentos/pix", json=ANA)
    assert resp.status_code == 201
    body = resp.json()
    assert Decimal(str(body["valor"])) == Decimal("19.90")
    assert body["qr_code"]
    assert body["status"] == "pending"
    payment_id = body["payment_id"]

    submissao = db.query(SubmissaoModel).filter_by(payment_id=payment_id).one()
    assert submissao.payment_status == "pending"
    assert submissao.status_analise == "pendente"

    resp = client.post("/api/pagamentos/status", json={"payment_id": payment_id})
    assert resp.status_code == 200
    assert resp.json()["status"] == "pending"
    assert notifier.enviados == []

    mp.definir_status(payment_id, "approved", "accredited")
    for _ in range(3):
        resp = client.post("/api/pagamentos/status", json={"payment_id": payment_id})
        assert resp.status_code == 200
        assert resp.json()["status"] == "approved"

    confirmados = notifier.eventos("pagamento_confirmado")
    assert len(confirmados) == 1
    assert confirmados[0]["nome"] == "Ana"
    assert confirmados[0]["whatsapp"] == "11999999999"
    assert confirmados[0]["payment_id"] == payment_id

    db.expire_all()
    submissao = db.query(SubmissaoModel).filter_by(payment_id=payment_id).one()
    assert submissao.payment_status == "approved"


def test_payment_id_numerico_aceito(client, mp):
    payment_id = client.post("/api/pagamentos/pix", json=ANA).json()["payment_id"]
    resp = client.post("/api/pagamentos/status", json={"payment_id": int(payment_id)})
    assert resp.status_code == 200
    assert resp.json()["payment_id"] == payment_id


def test_cupom_parceiro_aplica_desconto_e_registra_venda_na_aprovacao(client, mp, db):
    parceiro = _parceiro(db)

    resp = client.post("/api/pagamentos/pix", json={**ANA, "cupom": "  JOAO10 "})
    assert resp.status_code == 201
    body = resp.json()
    assert Decimal(str(body["valor"])) == Decimal("14.90")
    assert body["cupom_aplicado"] == "joao10"
    payment_id = body["payment_id"]

    assert db.query(VendaParceiroModel).count() == 0

    mp.definir_status(payment_id, "approved")
    client.post("/api/pagamentos/status", json={"payment_id": payment_id})
    client.post("/api/pagamentos/status", json={"payment_id": payment_id})

    vendas = db.query(VendaParceiroModel).all()
    assert len(vendas) == 1
    assert vendas[0].parceiro_id == parceiro.id
    assert vendas[0].commission_value == Decimal("5.00")
    assert vendas[0].master_commission_value == Decimal("0.00")
    assert vendas[0].payment_status == "pending"


def test_cupom_master_registra_uso_master(client, mp, db):
    from app.api.parceiros.models.model_parceiros import MasterParceiroModel

    user_id = criar_usuario("master@x.com", role="master_partner")
    master = MasterParceiroModel(
        user_id=user_id, nome="Maria", cpf="98765432100", whatsapp="11977776666",
        email="master@x.com", coupon_code="maria",
    )
    db.add(master)
    db.commit()

    body = client.post("/api/pagamentos/pix", json={**ANA, "cupom": "maria"}).json()
    mp.definir_status(body["payment_id"], "approved")
    client.post("/api/pagamentos/status", json={"payment_id": body["payment_id"]})

    usos = db.query(UsoCupomMasterModel).all()
    assert len(usos) == 1
    assert usos[0].master_parceiro_id == master.id
    assert usos[0].commission_value == Decimal("10.00")


def test_cupom_sistema(client, mp):
    resp = client.post("/api/pagamentos/pix", json={**ANA, "cupom": "CUPOM10"})
    assert resp.status_code == 201
    assert Decimal(str(resp.json()["valor"])) == Decimal("9.90")


def test_cupom_inexistente_rejeitado_sem_cobrar(client, mp):
    resp = client.post("/api/pagamentos/pix", json={**ANA, "cupom": "naoexiste"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Cupom inválido"
    assert mp.cobrancas == []


def test_validacao_antes_de_chamar_mercado_pago(client, mp):
    casos = [
        ({**ANA, "nome": "A"}, "Nome deve ter entre 2 e 100 caracteres"),
        ({**ANA, "email": "sem-arroba"}, "E-mail inválido"),
        ({**ANA, "whatsapp": "123"}, "WhatsApp inválido. Use formato: (11) 99999-9999"),
        ({**ANA, "url": "ana.dev"}, "URL inválida"),
    ]
    for payload, mensagem in casos:
        resp = client.post("/api/pagamentos/pix", json=payload)
        assert resp.status_code == 400
        assert resp.json()["error"] == mensagem
    assert mp.cobrancas == []


def test_sem_token_configurado_responde_500(client):
    app.dependency_overrides[get_mercadopago_client] = lambda: None
    resp = client.post("/api/pagamentos/pix", json=ANA)
    assert resp.status_code == 500
    assert resp.json()["error"] == "Configuração de pagamento ausente"


def test_erro_do_mercado_pago_vira_502_com_mensagem(client, mp, db):
    mp.erro_criacao = "payer.email must be a valid email"
    resp = client.post("/api/pagamentos/pix", json=ANA)
    assert resp.status_code == 502
    assert resp.json()["error"] == "payer.email must be a valid email"
    assert db.query(SubmissaoModel).count() == 0


def test_status_sem_payment_id(client):
    resp = client.post("/api/pagamentos/status", json={})
    assert resp.status_code == 400
    assert resp.json()["error"] == "payment_id é obrigatório"


def test_status_pagamento_desconhecido_502(client):
    resp = client.post("/api/pagamentos/status", json={"payment_id": "999"})
    assert resp.status_code == 502
    assert resp.json()["error"] == "Falha ao consultar status do pagamento"


def test_expirado_notifica_uma_vez_e_mantem_nao_aprovado(client, mp, notifier, db):
    payment_id = client.post("/api/pagamentos/pix", json=ANA).json()["payment_id"]
    mp.definir_status(payment_id, "cancelled", "expired")

    client.post("/api/pagamentos/status", json={"payment_id": payment_id})
    client.post("/api/pagamentos/status", json={"payment_id": payment_id})

    assert len(notifier.eventos("pagamento_expirado")) == 1
    assert notifier.eventos("pagamento_confirmado") == []
    submissao = db.query(SubmissaoModel).filter_by(payment_id=payment_id).one()
    assert submissao.payment_status == "cancelled"


def test_aprovado_nunca_volta_para_outro_status(client, mp, db):
    payment_id = client.post("/api/pagamentos/pix", json=ANA).json()["payment_id"]
    mp.definir_status(payment_id, "approved")
    client.post("/api/pagamentos/status", json={"payment_id": payment_id})

    mp.definir_status(payment_id, "in_process")
    client.post("/api/pagamentos/status", json={"payment_id": payment_id})

    submissao = db.query(SubmissaoModel).filter_by(payment_id=payment_id).one()
    assert submissao.payment_status == "approved"


def test_webhook_sem_submissao_usa_dados_reenviados(client, mp, notifier):
    mp.adicionar_pagamento("777", "approved")

    client.post("/api/pagamentos/status", json={"payment_id": "777"})
    assert notifier.enviados == []

    client.post("/api/pagamentos/status", json={
        "payment_id": "777",
        "cliente_nome": "Bruno",
        "cliente_whatsapp": "11955554444",
        "valor": "19.90",
        "cupom_utilizado": "CUPOM10",
    })
    confirmados = notifier.eventos("pagamento_confirmado")
    assert len(confirmados) == 1
    assert confirmados[0]["nome"] == "Bruno"
    assert confirmados[0]["cupom_utilizado"] == "cupom10"


def test_idempotency_key_reaproveita_pagamento_e_submissao(client, mp, db):
    headers = {"X-Idempotency-Key": "chave-fixa-1"}
    primeiro = client.post("/api/pagamentos/pix", json=ANA, headers=headers).json()
    segundo = client.post("/api/pagamentos/pix", json=ANA, headers=headers).json()

    assert primeiro["payment_id"] == segundo["payment_id"]
    assert primeiro["submissao_id"] == segundo["submissao_id"]
    assert db.query(SubmissaoModel).count() == 1


def test_pix_de_cadastro_de_parceiro_usa_valor_configurado(client, mp, db):
    resp = client.post("/api/pagamentos/pix", json={
        "nome": "Carlos Souza",
        "email": "carlos@x.com",
        "whatsapp": "11966665555",
        "finalidade": "cadastro_parceiro",
    })
    assert resp.status_code == 201
    body = resp.json()
    assert Decimal(str(body["valor"])) == Decimal("10.00")
    assert body["submissao_id"] is None
    assert mp.cobrancas[-1]["metadata"]["finalidade"] == "cadastro_parceiro"
    assert db.query(SubmissaoModel).count() == 0


def test_chave_publica(client):
    resp = client.get("/api/pagamentos/chave-publica")
    assert resp.status_code == 200
    assert resp.json()["public_key"] == "TEST-public-key"


def test_aprovado_ja_na_criacao_registra_comissao_na_consulta(client, mp, db):
    parceiro = _parceiro(db)
    mp.status_inicial = "approved"

    body = client.post("/api/pagamentos/pix", json={**ANA, "cupom": "joao10"}).json()
    submissao = db.query(SubmissaoModel).filter_by(payment_id=body["payment_id"]).one()
    assert submissao.payment_status == "pending"

    client.post("/api/pagamentos/status", json={"payment_id": body["payment_id"]})

    vendas = db.query(VendaParceiroModel).all()
    assert len(vendas) == 1
    assert vendas[0].parceiro_id == parceiro.id
    db.expire_all()
    assert db.query(SubmissaoModel).filter_by(payment_id=body["payment_id"]).one().payment_status == "approved"


def test_token_vencido_em_rota_publica_segue_anonimo(client, mp, db):
    from datetime import timedelta

    from app.core.security import create_access_token

    user_id = criar_usuario("ana@x.com")
    vencido = create_access_token({"sub": str(user_id), "role": "user"}, expires_delta=timedelta(minutes=-5))

    resp = client.post("/api/pagamentos/pix", json=ANA, headers={"Authorization": f"Bearer {vencido}"})
    assert resp.status_code == 201
    assert db.query(SubmissaoModel).one().user_id is None

    resp = client.post("/api/pagamentos/pix", json=ANA, headers={"Authorization": "Bearer lixo"})
    assert resp.status_code == 201


def test_status_cancelled_sem_detail_expired_tambem_expira(client, mp, notifier):
    payment_id = client.post("/api/pagamentos/pix", json=ANA).json()["payment_id"]
    mp.definir_status(payment_id, "cancelled", "by_collector")
    client.post("/api/pagamentos/status", json={"payment_id": payment_id})
    assert len(notifier.eventos("pagamento_expirado")) == 1
