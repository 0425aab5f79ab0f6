"""
Loguru setup for the API process.

Replaces loguru's default sink with a single stderr sink at LOG_LEVEL and
routes stdlib logging (uvicorn, SQLAlchemy, httpx) through loguru so every
line ends up in one stream.
"""

import logging
import sys

from loguru import logger

from .config import settings


class InterceptHandler(logging.Handler):
    """Forward stdlib log records to loguru"""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk back to the frame that issued the stdlib call
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging():
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level.upper(),
        # Structured JSON lines outside local development
        serialize=settings.app_env != "dev",
        backtrace=False,
        diagnose=settings.app_env == "dev",
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).handlers = [InterceptHandler()]
        logging.getLogger(name).propagate = False
    # SQL statement logging stays off unless asked for
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)

    logger.info("Logging configured", app=settings.app_name, env=settings.app_env, level=settings.log_level)
    return logger
