from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from app.api.recuperacao_senha.models.model_codigo_recuperacao import CodigoRecuperacaoModel
from app.utils.database_utils import now_trimmed


class CodigoRecuperacaoRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(self, obj: CodigoRecuperacaoModel) -> CodigoRecuperacaoModel:
        self.db.add(obj)
        self.db.flush()
        return obj

    def invalidar_anteriores(self, user_id: int) -> None:
        self.db.execute(
            update(CodigoRecuperacaoModel)
            .where(CodigoRecuperacaoModel.user_id == user_id, CodigoRecuperacaoModel.used.is_(False))
            .values(used=True)
        )

    def get_ultimo_valido(self, email: str) -> Optional[CodigoRecuperacaoModel]:
        """Código mais recente, não usado e não expirado do e-mail."""
        return (
            self.db.query(CodigoRecuperacaoModel)
            .filter(
                func.lower(CodigoRecuperacaoModel.email) == email.lower(),
                CodigoRecuperacaoModel.used.is_(False),
                CodigoRecuperacaoModel.expires_at > now_trimmed(),
            )
            .order_by(CodigoRecuperacaoModel.created_at.desc(), CodigoRecuperacaoModel.id.desc())
            .first()
        )

    def get_valido(self, recovery_id: int, user_id: int) -> Optional[CodigoRecuperacaoModel]:
        return (
            self.db.query(CodigoRecuperacaoModel)
            .filter(
                CodigoRecuperacaoModel.id == recovery_id,
                CodigoRecuperacaoModel.user_id == user_id,
                CodigoRecuperacaoModel.used.is_(False),
                CodigoRecuperacaoModel.expires_at > now_trimmed(),
            )
            .first()
        )

    def incrementar_tentativas(self, codigo: CodigoRecuperacaoModel) -> None:
        self.db.execute(
            update(CodigoRecuperacaoModel)
            .where(CodigoRecuperacaoModel.id == codigo.id)
            .values(attempts=CodigoRecuperacaoModel.attempts + 1)
        )
        self.db.refresh(codigo)

    def marcar_usado(self, codigo: CodigoRecuperacaoModel) -> bool:
        result = self.db.execute(
            update(CodigoRecuperacaoModel)
            .where(CodigoRecuperacaoModel.id == codigo.id, CodigoRecuperacaoModel.used.is_(False))
            .values(used=True)
        )
        return result.rowcount == 1
