import sys
from pathlib import Path
from typing import Optional

from loguru import logger
from medspa_seeder.config.settings import LoggingSettings

LOG_NAMESPACE = "medspa_seeder"

_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>seeder</magenta> <cyan>{name}</cyan>:<cyan>{line}</cyan> - "
    "{message}"
)
_FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{name}:{function}:{line} - {message}"
)


def configure_logging(settings: Optional[LoggingSettings] = None) -> None:
    """
    Replace the loguru sinks with the seeder's console and file sinks.

    Both sinks only accept records emitted under the `medspa_seeder` package,
    so the CLI can silence the seeder with `logger.disable(LOG_NAMESPACE)`.

    :param settings: Sink configuration; read from the environment when omitted.
    """
    cfg = settings or LoggingSettings()
    logger.remove()

    if cfg.console:
        logger.add(
            sys.stderr,
            level=cfg.level,
            format=_CONSOLE_FORMAT,
            filter=LOG_NAMESPACE,
            enqueue=True,
        )

    if cfg.enable_file:
        log_path = Path(cfg.filepath)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path,
            level=cfg.level,
            format=_FILE_FORMAT,
            filter=LOG_NAMESPACE,
            rotation=cfg.rotation,
            retention=cfg.retention,
            compression=cfg.compression,
            enqueue=True,
            backtrace=True,
            diagnose=True,
        )


configure_logging()
