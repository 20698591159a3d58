from enum import Enum


class RoleEnum(str, Enum):
    ADMIN = "admin"
    USER = "user"
    MASTER_PARTNER = "master_partner"


class StatusAnaliseEnum(str, Enum):
    PENDENTE = "pendente"
    SEGURO = "seguro"
    VULNERAVEL = "vulneravel"


class StatusContatoEnum(str, Enum):
    PENDENTE = "pendente"
    EM_CONTATO = "em_contato"
    RESOLVIDO = "resolvido"


class StatusComissaoEnum(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class PagamentoStatusEnum(str, Enum):
    """Status devolvidos pelo Mercado Pago em /v1/payments."""
    PENDING = "pending"
    APPROVED = "approved"
    AUTHORIZED = "authorized"
    IN_PROCESS = "in_process"
    IN_MEDIATION = "in_mediation"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    CHARGED_BACK = "charged_back"


class FinalidadePagamentoEnum(str, Enum):
    ANALISE = "analise"
    CADASTRO_PARCEIRO = "cadastro_parceiro"


class TipoCadastroEnum(str, Enum):
    PARCEIRO = "parceiro"
    MASTER = "master"


class TipoCupomEnum(str, Enum):
    SISTEMA = "sistema"
    PARCEIRO = "parceiro"
    MASTER = "master"


class EventoWebhookEnum(str, Enum):
    PAGAMENTO_CONFIRMADO = "pagamento_confirmado"
    PAGAMENTO_EXPIRADO = "pagamento_expirado"
    RECUPERACAO_SENHA = "recuperacao_senha"
