from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

TZ_SP = ZoneInfo('America/Sao_Paulo')


def now_trimmed():
    """
    Retorna datetime atual em São Paulo, sem microsegundos.

    As colunas DateTime são sem timezone e a sessão do Postgres usa
    America/Sao_Paulo, então o valor é gravado "naive" no horário local.
    """
    return datetime.now(TZ_SP).replace(microsecond=0, tzinfo=None)


def now_plus(minutes: int) -> datetime:
    return now_trimmed() + timedelta(minutes=minutes)
