from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.cadastros.models.user_model import UserModel
from app.api.shared.schemas.schema_shared_enums import StatusAnaliseEnum
from app.api.submissoes.schemas.schema_submissao import EstatisticasOut, SubmissaoOut, SubmissaoUpdate
from app.api.submissoes.services.service_submissao import SubmissaoService
from app.core.admin_dependencies import get_current_user, require_admin
from app.database.db_connection import get_db

router = APIRouter(prefix="/api/submissoes", tags=["Submissões"])
router_admin = APIRouter(prefix="/api/admin", tags=["Admin - Submissões"], dependencies=[Depends(require_admin)])


@router.get("/minhas", response_model=List[SubmissaoOut])
def listar_minhas_submissoes(
    current_user: UserModel = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Análises do cliente logado (por usuário ou e-mail informado no formulário)."""
    return SubmissaoService(db).listar_do_usuario(current_user)


@router_admin.get("/submissoes", response_model=List[SubmissaoOut])
def listar_submissoes(
    status_analise: Optional[StatusAnaliseEnum] = Query(default=None),
    db: Session = Depends(get_db),
):
    """Submissões com pagamento aprovado."""
    return SubmissaoService(db).listar_aprovadas(status_analise.value if status_analise else None)


@router_admin.get("/submissoes/remarketing", response_model=List[SubmissaoOut])
def listar_remarketing(db: Session = Depends(get_db)):
    """Submissões que não chegaram a ter o pagamento aprovado."""
    return SubmissaoService(db).listar_remarketing()


@router_admin.patch("/submissoes/{submissao_id}", response_model=SubmissaoOut)
def atualizar_submissao(submissao_id: int, body: SubmissaoUpdate, db: Session = Depends(get_db)):
    return SubmissaoService(db).atualizar(submissao_id, body)


@router_admin.delete("/submissoes/{submissao_id}", status_code=status.HTTP_204_NO_CONTENT)
def deletar_submissao(submissao_id: int, db: Session = Depends(get_db)):
    SubmissaoService(db).deletar(submissao_id)


@router_admin.get("/estatisticas", response_model=EstatisticasOut)
def estatisticas(db: Session = Depends(get_db)):
    return SubmissaoService(db).estatisticas()
