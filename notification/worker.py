#!/usr/bin/env python3
"""
RQ Worker for match notifications.

Processes jobs enqueued by MatchNotificationDispatcher.

Usage:
    python -m notification.worker
    python -m notification.worker --burst
    python -m notification.worker --verbose
"""

import sys
import argparse
import logging

from redis import Redis
from redis.exceptions import RedisError
from rq import Worker

from core.config_loader import load_config
from notification.dispatcher import DEFAULT_REDIS_URL

logger = logging.getLogger(__name__)


def start_worker(redis_url: str, queues: list, burst: bool = False):
    """Start the RQ worker."""
    logger.info("Starting RQ Worker")
    logger.info(f"Queues: {', '.join(queues)}")
    logger.info(f"Burst mode: {burst}")

    try:
        redis_conn = Redis.from_url(redis_url)
        redis_conn.ping()
        logger.info("Connected to Redis")

        worker = Worker(queues, connection=redis_conn)
        if burst:
            logger.info("Running in burst mode...")
            worker.work(burst=True)
        else:
            logger.info("Worker started. Press Ctrl+C to stop.")
            worker.work()

    except KeyboardInterrupt:
        logger.info("Worker stopped")
    except RedisError as e:
        logger.error(f"Redis error: {e}")
        sys.exit(1)


def main():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    parser = argparse.ArgumentParser(description='Expert matching notification worker')
    parser.add_argument('--burst', action='store_true', help='Process all and exit')
    parser.add_argument('--queues', nargs='+', default=None)
    parser.add_argument('--config', default='config.yaml')
    parser.add_argument('--verbose', action='store_true')
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = load_config(args.config).notifications
    start_worker(
        redis_url=config.redis_url or DEFAULT_REDIS_URL,
        queues=args.queues or [config.queue_name],
        burst=args.burst
    )


if __name__ == '__main__':
    main()
