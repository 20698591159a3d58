# app/database/db_connection.py

import logging
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from ..config.settings import DB_CONFIG, DB_SSL_MODE, DATABASE_URL
from app.core.rls_context import get_rls_role, get_rls_user_id

# Base única para todos os models
Base = declarative_base()

logger = logging.getLogger(__name__)


def _montar_connection_string() -> str:
    if DATABASE_URL:
        # Heroku/Supabase ainda entregam "postgres://"
        if DATABASE_URL.startswith("postgres://"):
            return DATABASE_URL.replace("postgres://", "postgresql://", 1)
        return DATABASE_URL

    missing = [k for k in ('database', 'user', 'password', 'host', 'port') if not DB_CONFIG.get(k)]
    if missing:
        raise RuntimeError(f"Configuração do banco inválida, faltando variáveis: {', '.join(missing)}")

    ssl_query = f"?sslmode={DB_SSL_MODE}" if DB_SSL_MODE else ""
    return (
        f"postgresql://{DB_CONFIG['user']}:{DB_CONFIG['password']}"
        f"@{DB_CONFIG['host']}:{DB_CONFIG['port']}/{DB_CONFIG['database']}{ssl_query}"
    )


connection_string = _montar_connection_string()

if connection_string.startswith("sqlite"):
    # SQLite (dev/testes): mesma conexão compartilhada entre threads do TestClient
    engine = create_engine(
        connection_string,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    engine = create_engine(
        connection_string,
        pool_pre_ping=True,
        connect_args={
            "options": "-c timezone=America/Sao_Paulo"
        }
    )

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def _aplicar_contexto_rls(db) -> None:
    """
    Injeta o usuário do request na sessão (Postgres) para as políticas RLS:
        user_id = nullif(current_setting('app.user_id', true), '')::int
    """
    if engine.dialect.name != "postgresql":
        return

    user_id = get_rls_user_id()
    role = get_rls_role()
    try:
        db.execute(
            text("SELECT set_config('app.user_id', :v, true)"),
            {"v": str(user_id) if user_id is not None else ""},
        )
        db.execute(
            text("SELECT set_config('app.role', :v, true)"),
            {"v": role or ""},
        )
    except Exception as e:
        # Não deve bloquear a API caso o banco não aceite set_config por algum motivo.
        logger.warning("Falha ao aplicar contexto RLS (set_config): %s", e)


# Dependency para FastAPI
def get_db():
    db = SessionLocal()
    try:
        _aplicar_contexto_rls(db)
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
