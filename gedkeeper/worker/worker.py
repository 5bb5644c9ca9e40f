"""
RQ Worker entry point.

Run this as a separate process: python -m gedkeeper.worker.worker
"""

import logging

from redis import Redis
from rq import Worker

from gedkeeper.config import configure_logging, settings

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    configure_logging()

    # Connect to Redis
    redis_conn = Redis.from_url(settings.redis_url)

    # Start worker
    worker = Worker(["gedkeeper"], connection=redis_conn)
    logger.info("Starting GedKeeper worker...")
    worker.work()
