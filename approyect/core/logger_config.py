import logging
from approyect.core.config import settings


def setup_logging():
    """Configura el logging de la API (consola, nivel tomado de la configuración)."""
    log_formatter = logging.Formatter(
        '%(asctime)s - %(levelname)s - [%(module)s:%(lineno)d] - %(message)s'
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(log_formatter)

    logger = logging.getLogger("approyect")
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    if logger.hasHandlers():
        logger.handlers.clear()

    logger.addHandler(console_handler)
    logger.info("Logging configurado (nivel %s)", settings.LOG_LEVEL.upper())
