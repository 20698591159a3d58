from datetime import timedelta

from app.api.recuperacao_senha.models.model_codigo_recuperacao import CodigoRecuperacaoModel
from app.utils.database_utils import now_trimmed
from tests.conftest import criar_usuario

MSG = "Se o e-mail existir, você receberá um código de recuperação."


def _solicitar(client, notifier, email="cliente@x.com"):
    resp = client.post("/api/auth/recuperacao/solicitar", json={"email": email})
    assert resp.status_code == 200
    return notifier.eventos("recuperacao_senha")[-1]["codigo"]


def test_solicitar_responde_igual_para_email_inexistente(client, notifier):
    resp = client.post("/api/auth/recuperacao/solicitar", json={"email": "ninguem@x.com"})
    assert resp.status_code == 200
    assert resp.json()["message"] == MSG
    assert notifier.enviados == []


def test_solicitar_envia_codigo_pelo_webhook(client, notifier):
    criar_usuario("cliente@x.com", nome="Cliente Teste")
    resp = client.post("/api/auth/recuperacao/solicitar", json={"email": "Cliente@X.com"})
    assert resp.json()["message"] == MSG

    enviados = notifier.eventos("recuperacao_senha")
    assert len(enviados) == 1
    assert len(enviados[0]["codigo"]) == 8
    assert enviados[0]["nome_cliente"] == "Cliente Teste"
    assert enviados[0]["email"] == "cliente@x.com"


def test_solicitar_sem_email(client):
    resp = client.post("/api/auth/recuperacao/solicitar", json={})
    assert resp.status_code == 400
    assert resp.json()["error"] == "E-mail é obrigatório"


def test_verificar_e_redefinir(client, notifier):
    user_id = criar_usuario("cliente@x.com")
    codigo = _solicitar(client, notifier)

    resp = client.post("/api/auth/recuperacao/verificar", json={"email": "cliente@x.com", "code": codigo.lower()})
    assert resp.status_code == 200
    body = resp.json()
    assert body["user_id"] == user_id

    resp = client.post("/api/auth/recuperacao/redefinir", json={
        "user_id": body["user_id"],
        "recovery_id": body["recovery_id"],
        "new_password": "NovaSenha@1",
    })
    assert resp.status_code == 200
    assert resp.json()["message"] == "Senha alterada com sucesso!"

    login = client.post("/api/auth/token", json={"email": "cliente@x.com", "password": "NovaSenha@1"})
    assert login.status_code == 200

    # o código não serve uma segunda vez
    resp = client.post("/api/auth/recuperacao/redefinir", json={
        "user_id": body["user_id"],
        "recovery_id": body["recovery_id"],
        "new_password": "OutraSenha@2",
    })
    assert resp.status_code == 400
    assert resp.json()["error"] == "Código de recuperação inválido ou expirado"


def test_codigo_incorreto_informa_tentativas_restantes(client, notifier):
    criar_usuario("cliente@x.com")
    _solicitar(client, notifier)

    resp = client.post("/api/auth/recuperacao/verificar", json={"email": "cliente@x.com", "code": "ERRADO00"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["remaining_attempts"] == 4
    assert body["error"] == "Código incorreto. 4 tentativa(s) restante(s)."


def test_limite_de_tentativas_invalida_codigo(client, notifier, db):
    criar_usuario("cliente@x.com")
    codigo = _solicitar(client, notifier)

    for _ in range(5):
        client.post("/api/auth/recuperacao/verificar", json={"email": "cliente@x.com", "code": "ERRADO00"})

    # mesmo com o código certo, attempts == max bloqueia
    resp = client.post("/api/auth/recuperacao/verificar", json={"email": "cliente@x.com", "code": codigo})
    assert resp.status_code == 400
    assert resp.json()["attempts_exceeded"] is True

    registro = db.query(CodigoRecuperacaoModel).one()
    assert registro.used is True
    assert registro.attempts == 5


def test_codigo_expirado_rejeitado_mesmo_sem_tentativas(client, notifier, db):
    criar_usuario("cliente@x.com")
    codigo = _solicitar(client, notifier)

    registro = db.query(CodigoRecuperacaoModel).one()
    registro.expires_at = now_trimmed() - timedelta(minutes=1)
    db.commit()

    resp = client.post("/api/auth/recuperacao/verificar", json={"email": "cliente@x.com", "code": codigo})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Código expirado ou inválido. Solicite um novo código."


def test_novo_codigo_invalida_o_anterior(client, notifier):
    criar_usuario("cliente@x.com")
    primeiro = _solicitar(client, notifier)
    segundo = _solicitar(client, notifier)

    resp = client.post("/api/auth/recuperacao/verificar", json={"email": "cliente@x.com", "code": primeiro})
    if primeiro != segundo:
        assert resp.status_code == 400
    resp = client.post("/api/auth/recuperacao/verificar", json={"email": "cliente@x.com", "code": segundo})
    assert resp.status_code == 200


def test_redefinir_senha_curta(client):
    resp = client.post("/api/auth/recuperacao/redefinir", json={
        "user_id": 1, "recovery_id": 1, "new_password": "curta",
    })
    assert resp.status_code == 400
    assert resp.json()["error"] == "A senha deve ter no mínimo 8 caracteres"


def test_codigo_com_acentos_conta_como_tentativa_errada(client, notifier, db):
    criar_usuario("cliente@x.com")
    _solicitar(client, notifier)

    resp = client.post("/api/auth/recuperacao/verificar", json={"email": "cliente@x.com", "code": "ÇÃOÇÃOÇÃ"})
    assert resp.status_code == 400
    assert resp.json()["remaining_attempts"] == 4
    assert db.query(CodigoRecuperacaoModel).one().attempts == 1
