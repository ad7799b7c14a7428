"""
Logger Setup
------------
loguru configuration shared by the API and the maintenance scripts.

Every record carries a ``request_id`` extra ("-" outside a request); the
request logging middleware sets it so all lines written while serving one
request can be correlated. With ``log_json`` the stdout sink emits one JSON
object per record for log shippers instead of the coloured console format.
"""

import sys
from typing import Optional

from loguru import logger

from taskflow.core.config_manager import ApplicationSettings, settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[request_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

FILE_FORMAT = (
    "{time:YYYY-MM-DDTHH:mm:ss.SSSZZ} | {level: <8} | {extra[request_id]} | "
    "{name}:{function}:{line} | {message}"
)


def configure_logger(app_settings: Optional[ApplicationSettings] = None) -> None:
    """
    Replace loguru's default sink with the service sinks.

    Args:
        app_settings: Settings to read levels and sinks from (defaults to global)
    """
    app_settings = app_settings or settings

    logger.remove()
    logger.configure(extra={"request_id": "-"})

    if app_settings.log_json:
        logger.add(
            sys.stdout,
            level=app_settings.log_level,
            serialize=True,
            backtrace=False,
            diagnose=False,
        )
    else:
        logger.add(
            sys.stdout,
            format=CONSOLE_FORMAT,
            level=app_settings.log_level,
            colorize=True,
            backtrace=True,
            diagnose=app_settings.debug,
        )

    if app_settings.log_file_path:
        # enqueue: uvicorn workers may share the file
        logger.add(
            app_settings.log_file_path,
            format=FILE_FORMAT,
            level=app_settings.log_level,
            rotation=app_settings.log_file_rotation,
            retention=app_settings.log_file_retention,
            compression="gz",
            enqueue=True,
            backtrace=True,
            diagnose=False,
        )

    logger.info(
        f"Logger configured with level {app_settings.log_level}"
        f"{' (json)' if app_settings.log_json else ''}"
    )
