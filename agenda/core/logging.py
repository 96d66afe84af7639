import logging
import sys
from typing import Optional

from agenda.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configura o logger raiz do pacote "agenda".

    Chamado uma vez no startup; os módulos usam logging.getLogger(__name__).
    """
    logger = logging.getLogger("agenda")

    # evita handlers duplicados em reload
    if logger.handlers:
        return logger

    level_name = (level or settings.log_level).upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_file = log_file or settings.log_file
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # menos ruído das libs
    logging.getLogger("passlib").setLevel(logging.WARNING)

    return logger
