"""
Router para monitoramento: métricas Prometheus e leitura dos logs.
"""
import re
from collections import deque
from typing import Optional

from fastapi import APIRouter, Depends, Query, HTTPException, status
from fastapi.responses import Response

from app.core.admin_dependencies import require_admin
from app.utils.logger import LOG_DIR, logger
from app.utils.prometheus_metrics import get_metrics, CONTENT_TYPE_LATEST

router = APIRouter(
    prefix="/api/monitoring",
    tags=["Monitoring - Monitoramento"],
    dependencies=[Depends(require_admin)],
)

# Métricas ficam públicas para o scraper
router_public = APIRouter(tags=["Monitoring - Monitoramento"])

LOG_FILE = LOG_DIR / "secscan.log"
LOG_LINE_RE = re.compile(r'\[(.*?)\] \[(.*?)\] (.*?): (.*)')


@router_public.get("/metrics", include_in_schema=False)
def metrics():
    return Response(content=get_metrics(), media_type=CONTENT_TYPE_LATEST)


@router.get("/logs")
def get_logs_json(
    lines: int = Query(100, ge=1, le=1000),
    level: Optional[str] = Query(None, description="INFO, WARNING, ERROR..."),
    search: Optional[str] = Query(None),
):
    """Últimas linhas do log da API, com filtro opcional por nível e texto."""
    if not LOG_FILE.exists():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Arquivo de log não encontrado")

    try:
        with open(LOG_FILE, 'r', encoding='utf-8') as f:
            log_lines = list(deque(f, maxlen=lines))
    except OSError as e:
        logger.error(f"[Monitoring] Erro ao ler logs: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Erro ao ler logs")

    if level:
        log_lines = [line for line in log_lines if f"[{level.upper()}]" in line]
    if search:
        log_lines = [line for line in log_lines if search.lower() in line.lower()]

    parsed_logs = []
    for line in log_lines:
        line = line.strip()
        if not line:
            continue
        match = LOG_LINE_RE.match(line)
        if match:
            timestamp, log_level, logger_name, message = match.groups()
            parsed_logs.append({
                "timestamp": timestamp,
                "level": log_level,
                "logger": logger_name,
                "message": message,
            })
        else:
            parsed_logs.append({"raw": line})

    return {
        "total": len(parsed_logs),
        "lines": lines,
        "filters": {"level": level, "search": search},
        "logs": parsed_logs,
    }
