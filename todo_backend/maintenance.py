"""
Todo Backend — Expired Session Sweep
======================================

What:  Deletes session rows whose expiry has passed.
How:   Opens one session on the configured database and calls
       SessionService.purge_expired(). Expiry checks on the request path never
       depend on this; it only bounds table growth.
When:  Run on a schedule (cron, Kubernetes CronJob):

    python -m todo_backend.maintenance
"""

import asyncio
import logging
from typing import Optional

from todo_backend.config import settings
from todo_backend.database import Database
from todo_backend.services.session_service import SessionService

logger = logging.getLogger(__name__)


async def purge_expired_sessions(database: Database) -> int:
    """Returns the number of expired sessions removed."""
    async with database.session() as db:
        removed = await SessionService(db).purge_expired()
    logger.info("Purged %d expired sessions", removed)
    return removed


async def _main(database: Optional[Database] = None) -> None:
    database = database or Database.from_settings(settings)
    try:
        await purge_expired_sessions(database)
    finally:
        await database.dispose()


if __name__ == "__main__":
    from todo_backend.main import setup_logging

    setup_logging(settings.log_level)
    asyncio.run(_main())
