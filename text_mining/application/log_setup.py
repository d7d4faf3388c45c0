# text_mining/application/log_setup.py
import sys
from loguru import logger
from text_mining.application.settings import get_settings

def setup_logging() -> None:
    """Configure Loguru once, based on Settings.debug."""
    settings = get_settings()

    logger.remove()  # drop default handler(s) so repeated setup doesn't duplicate lines
    logger.add(
        sys.stdout,
        level="DEBUG" if settings.debug else "INFO",
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
               "<level>{level: <8}</level> | "
               "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
               "<level>{message}</level>",
        backtrace=False,
        diagnose=False,
    )
    logger.debug("Logging configured for env='{}'", settings.app_env)
