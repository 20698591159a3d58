from decimal import Decimal

from app.api.parceiros.models.model_parceiros import ConfiguracaoCadastroModel, ParceiroModel
from tests.conftest import auth_header

SENHA = "Senha@123"


def _payload_parceiro(**extra):
    payload = {
        "nome": "João Silva",
        "whatsapp": "(11) 98888-7777",
        "cpf": "123.456.789-01",
        "pixKey": "joao@pix.com",
        "couponCode": "joao10",
        "email": "joao@x.com",
        "password": SENHA,
    }
    payload.update(extra)
    return payload


def _payload_master(**extra):
    payload = {
        "nome": "Maria Master",
        "cpf": "98765432100",
        "whatsapp": "11977776666",
        "email": "maria@x.com",
        "password": SENHA,
        "coupon_code": "maria",
    }
    payload.update(extra)
    return payload


def _login(client, email, senha=SENHA):
    token = client.post("/api/auth/token", json={"email": email, "password": senha}).json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


def test_cupom_master_isenta_pagamento(client, mp, db):
    assert client.post("/api/master-parceiros/cadastro", json=_payload_master()).status_code == 200

    resp = client.post("/api/parceiros/cadastro", json=_payload_parceiro(masterCoupon="MARIA"))
    assert resp.status_code == 200
    assert resp.json()["used_master_coupon"] is True
    assert mp.cobrancas == []

    parceiro = db.query(ParceiroModel).filter_by(coupon_code="joao10").one()
    assert parceiro.master_parceiro_id is not None
    assert parceiro.cpf == "12345678901"
    assert parceiro.pagamento_id is None


def test_cupom_master_desconhecido_exige_pagamento(client):
    resp = client.post("/api/parceiros/cadastro", json=_payload_parceiro(masterCoupon="naoexiste"))
    assert resp.status_code == 400
    assert resp.json()["error"] == "Pagamento é obrigatório para registro sem cupom de Parceiro Master"


def test_pagamento_aprovado_libera_cadastro_e_nao_pode_ser_reusado(client, mp):
    mp.adicionar_pagamento("555", "approved", {"finalidade": "cadastro_parceiro"})

    resp = client.post("/api/parceiros/cadastro", json=_payload_parceiro(paymentId="555"))
    assert resp.status_code == 200
    assert resp.json()["used_master_coupon"] is False

    outro = _payload_parceiro(
        paymentId="555", cpf="11122233344", email="outro@x.com", couponCode="outro10",
    )
    resp = client.post("/api/parceiros/cadastro", json=outro)
    assert resp.status_code == 409
    assert resp.json()["error"] == "Este pagamento já foi utilizado em outro cadastro"


def test_pagamento_pendente_rejeitado(client, mp):
    mp.adicionar_pagamento("556", "pending")
    resp = client.post("/api/parceiros/cadastro", json=_payload_parceiro(paymentId="556"))
    assert resp.status_code == 400
    assert resp.json()["error"] == "Pagamento não foi confirmado"


def test_pagamento_de_analise_nao_serve_para_cadastro(client, mp):
    mp.adicionar_pagamento("557", "approved", {"finalidade": "analise"})
    resp = client.post("/api/parceiros/cadastro", json=_payload_parceiro(paymentId="557"))
    assert resp.status_code == 400


def test_cupom_reservado_rejeitado_em_qualquer_caixa(client):
    for codigo in ("CUPOM10", "cupom10", "10C"):
        resp = client.post("/api/parceiros/cadastro", json=_payload_parceiro(couponCode=codigo))
        assert resp.status_code == 400
        assert resp.json()["error"] == "Este código de cupom não pode ser utilizado"

    resp = client.post("/api/master-parceiros/cadastro", json=_payload_master(coupon_code="Cupom10"))
    assert resp.status_code == 400
    assert resp.json()["error"] == "Este código de cupom não pode ser utilizado"


def test_cupom_duplicado_apos_normalizacao(client, mp):
    client.post("/api/master-parceiros/cadastro", json=_payload_master())
    assert client.post("/api/parceiros/cadastro", json=_payload_parceiro(masterCoupon="maria")).status_code == 200

    segundo = _payload_parceiro(
        masterCoupon="maria", couponCode=" JOAO10 ", cpf="11122233344", email="outro@x.com",
    )
    resp = client.post("/api/parceiros/cadastro", json=segundo)
    assert resp.status_code == 409

    # cupom igual ao de um master também conflita
    terceiro = _payload_parceiro(couponCode="Maria", cpf="55566677788", email="terceiro@x.com")
    resp = client.post("/api/parceiros/cadastro", json=terceiro)
    assert resp.status_code == 409
    assert resp.json()["error"] == "Este código de cupom já está em uso"


def test_cpf_duplicado(client):
    client.post("/api/master-parceiros/cadastro", json=_payload_master())
    client.post("/api/parceiros/cadastro", json=_payload_parceiro(masterCoupon="maria"))
    resp = client.post(
        "/api/parceiros/cadastro",
        json=_payload_parceiro(masterCoupon="maria", couponCode="novo10", email="novo@x.com"),
    )
    assert resp.status_code == 409
    assert resp.json()["error"] == "CPF já cadastrado"


def test_proprio_cupom_igual_ao_master(client):
    client.post("/api/master-parceiros/cadastro", json=_payload_master())
    resp = client.post("/api/parceiros/cadastro", json=_payload_parceiro(couponCode="maria", masterCoupon="maria"))
    assert resp.status_code == 400


def test_validacoes_do_formulario(client):
    casos = [
        (_payload_parceiro(cpf="123"), "CPF inválido"),
        (_payload_parceiro(whatsapp="9999"), "WhatsApp inválido"),
        (_payload_parceiro(couponCode="ab"), "Cupom deve ter entre 3 e 20 caracteres (apenas letras e números)"),
        (_payload_parceiro(password="fraca"), None),
    ]
    for payload, mensagem in casos:
        resp = client.post("/api/parceiros/cadastro", json=payload)
        assert resp.status_code == 400
        if mensagem:
            assert resp.json()["error"] == mensagem


def test_cadastro_desabilitado(client, admin_headers):
    resp = client.patch(
        "/api/admin/configuracoes/parceiro",
        json={"cadastro_habilitado": False},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["cadastro_habilitado"] is False

    resp = client.post("/api/parceiros/cadastro", json=_payload_parceiro(paymentId="1"))
    assert resp.status_code == 403


def test_cadastro_master_fecha_apos_o_primeiro(client, db):
    resp = client.post("/api/master-parceiros/cadastro", json=_payload_master())
    assert resp.status_code == 200
    assert resp.json()["user_id"]

    config = db.query(ConfiguracaoCadastroModel).filter_by(tipo="master").one()
    assert config.cadastro_habilitado is False

    resp = client.post(
        "/api/master-parceiros/cadastro",
        json=_payload_master(cpf="11122233344", email="outra@x.com", coupon_code="outra"),
    )
    assert resp.status_code == 403
    assert resp.json()["error"] == "Cadastro de Parceiro Master não está mais disponível"


def test_master_campos_obrigatorios(client):
    resp = client.post("/api/master-parceiros/cadastro", json=_payload_master(coupon_code=""))
    assert resp.status_code == 400
    assert resp.json()["error"] == "Todos os campos são obrigatórios"


def test_painel_parceiro_e_master(client, mp):
    client.post("/api/master-parceiros/cadastro", json=_payload_master())
    client.post("/api/parceiros/cadastro", json=_payload_parceiro(masterCoupon="maria"))

    # venda com o cupom do parceiro: comissão do parceiro + comissão indireta do master
    pix = client.post("/api/pagamentos/pix", json={
        "nome": "Ana", "email": "ana@x.com", "url": "https://ana.dev",
        "whatsapp": "11999999999", "cupom": "joao10",
    }).json()
    mp.definir_status(pix["payment_id"], "approved")
    client.post("/api/pagamentos/status", json={"payment_id": pix["payment_id"]})

    painel = client.get("/api/parceiros/me", headers=_login(client, "joao@x.com")).json()
    assert painel["parceiro"]["coupon_code"] == "joao10"
    assert len(painel["vendas"]) == 1
    assert Decimal(str(painel["totais"]["a_receber"])) == Decimal("5.00")

    painel_master = client.get("/api/master-parceiros/me", headers=_login(client, "maria@x.com")).json()
    assert [p["coupon_code"] for p in painel_master["parceiros_indicados"]] == ["joao10"]
    assert len(painel_master["vendas_indiretas"]) == 1
    assert Decimal(str(painel_master["totais_indiretos"]["a_receber"])) == Decimal("2.50")


def test_painel_master_exige_papel(client):
    client.post("/api/master-parceiros/cadastro", json=_payload_master())
    client.post("/api/parceiros/cadastro", json=_payload_parceiro(masterCoupon="maria"))
    resp = client.get("/api/master-parceiros/me", headers=_login(client, "joao@x.com"))
    assert resp.status_code == 403


def test_painel_sem_token(client):
    assert client.get("/api/parceiros/me").status_code == 401


def test_painel_parceiro_para_usuario_comum(client):
    from tests.conftest import criar_usuario

    user_id = criar_usuario("cliente@x.com")
    resp = client.get("/api/parceiros/me", headers=auth_header(user_id))
    assert resp.status_code == 404
