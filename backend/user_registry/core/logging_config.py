import logging
import sys
from pathlib import Path

from user_registry.config import ENVIRONMENT, LOG_LEVEL, LOGS_DIR

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _file_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.FileHandler:
    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    environment: str = ENVIRONMENT,
    level: str = LOG_LEVEL,
    log_dir: Path = LOGS_DIR,
) -> logging.Logger:
    """
    Configure the root logger for the service.

    - development: console only, at ``level`` (DEBUG shows request-level detail)
    - production: console at INFO, plus app.log (everything) and errors.log in ``log_dir``
    """
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    production = environment == "production"

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    # ===== CONSOLE =====
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO if production else logging.NOTSET)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # ===== FILES (production only) =====
    if production:
        log_dir.mkdir(parents=True, exist_ok=True)
        root_logger.addHandler(_file_handler(log_dir / "app.log", logging.DEBUG, formatter))
        root_logger.addHandler(_file_handler(log_dir / "errors.log", logging.ERROR, formatter))

    # Quiet down chatty libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    root_logger.debug("Logging configured: environment=%s level=%s", environment, level)
    return root_logger
