# logger_conf.py
import logging
from typing import Optional

from settings import LOG_FILE, LOG_LEVEL

CONSOLE_FORMAT = "%(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str = "movie-search", level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Logger por módulo com dois destinos: console no nível de MOVIE_SEARCH_LOG_LEVEL
    (INFO por padrão) e arquivo em DEBUG com status HTTP e trechos de resposta.
    Chamadas repetidas com o mesmo nome devolvem o logger já configurado.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(logging.DEBUG)

    console = logging.StreamHandler()
    console.setLevel(level or LOG_LEVEL)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    # delay=True: o arquivo só é criado no primeiro registro
    file_handler = logging.FileHandler(log_file or LOG_FILE, encoding="utf-8", delay=True)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    logger.addHandler(file_handler)

    return logger
