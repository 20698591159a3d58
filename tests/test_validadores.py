import pytest

from app.utils.validadores import (
    cpf_valido,
    cupom_formato_valido,
    normalizar_cupom,
    senha_forte,
    url_valida,
    whatsapp_valido,
)


@pytest.mark.parametrize("cpf", ["12345678901", "123.456.789-01", " 123 456 789 01 ", "000.000.000-00"])
def test_cpf_com_11_digitos_aceito(cpf):
    assert cpf_valido(cpf)


@pytest.mark.parametrize("cpf", ["", None, "1234567890", "123456789012", "123.456.789-0", "abc"])
def test_cpf_com_outro_tamanho_rejeitado(cpf):
    assert not cpf_valido(cpf)


@pytest.mark.parametrize("numero", ["11999999999", "(11) 99999-9999", "+55 11 99999-9999", "1133334444"])
def test_whatsapp_formatos_do_formulario(numero):
    assert whatsapp_valido(numero)


@pytest.mark.parametrize("numero", ["", "999", "11 9999", "+1 555 123 4567"])
def test_whatsapp_invalido(numero):
    assert not whatsapp_valido(numero)


def test_normalizar_cupom():
    assert normalizar_cupom("  PROMO10 ") == "promo10"
    assert normalizar_cupom("   ") is None
    assert normalizar_cupom(None) is None


def test_formato_cupom():
    assert cupom_formato_valido("abc")
    assert cupom_formato_valido("a" * 20)
    assert not cupom_formato_valido("ab")
    assert not cupom_formato_valido("a" * 21)
    assert not cupom_formato_valido("com-hifen")
    assert not cupom_formato_valido("MAIUSC")


def test_senha_forte():
    assert senha_forte("Senha@123")
    assert not senha_forte("senha@123")
    assert not senha_forte("Senha123")
    assert not senha_forte("Se@1")


def test_url():
    assert url_valida("https://ana.dev")
    assert url_valida("http://exemplo.com.br/pagina")
    assert not url_valida("ftp://exemplo.com")
    assert not url_valida("ana.dev")
    assert not url_valida("https://" + "a" * 500 + ".com")
