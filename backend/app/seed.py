# app/seed.py
"""
Database seeding command: `python -m app.seed`.

Exit code 0 on success and 1 on any failure; the container entrypoint only
records the "already seeded" marker after a 0.
"""
import asyncio
import logging
import sys

from tortoise import Tortoise

from app.core.bootstrap import run_seeders
from app.core.db import TORTOISE_ORM
from app.logging_config import configure_logging

logger = logging.getLogger("uvicorn.error")

async def seed() -> None:
    await Tortoise.init(config=TORTOISE_ORM)
    try:
        await run_seeders()
    finally:
        await Tortoise.close_connections()

def main() -> int:
    configure_logging()
    try:
        asyncio.run(seed())
    except Exception:
        logger.exception("[seed] Seeding failed")
        return 1
    logger.info("[seed] Seeding finished")
    return 0

if __name__ == "__main__":
    sys.exit(main())
