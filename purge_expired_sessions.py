"""
Expired Session Sweep
---------------------
Deletes refresh-token rows whose expiry has passed. Idempotent and safe to
run concurrently with live traffic; meant for cron or another scheduler.

Usage:
    python purge_expired_sessions.py
"""

import asyncio
import sys

from loguru import logger

from taskflow.core.config_manager import settings
from taskflow.core.container import ServiceContainer
from taskflow.core.logger_setup import configure_logger


async def purge() -> int:
    container = ServiceContainer.from_settings(settings)
    try:
        await container.initialize()
        return await container.auth_service.purge_expired_sessions()
    finally:
        await container.close()


def main() -> int:
    configure_logger(settings)
    try:
        deleted = asyncio.run(purge())
    except Exception as e:
        logger.error(f"Session sweep failed: {e}")
        return 1
    logger.info(f"Session sweep complete: {deleted} rows deleted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
