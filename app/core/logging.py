import logging
import sys
from typing import Union


def configure_logging(level: Union[str, int] = "INFO") -> None:
    """Единая настройка логирования для приложения"""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        stream=sys.stdout,
    )
    # SQL-эхо управляется через SQL_ECHO, а не общим уровнем
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    # httpx пишет полный URL запроса на INFO, а в нем ключ Gemini (?key=...)
    logging.getLogger("httpx").setLevel(logging.WARNING)
