"""Long-running process that arms the recurring schedule syncs."""
import argparse
import logging
import signal
import sys
import threading
from typing import List, Optional

import boto3

from lambda_function import build_orchestrator
from logging_config import setup_logging
from scheduler.sync_scheduler import SyncScheduler
from settings import Settings
from storage.tables import create_tables

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Sports schedule sync scheduler')
    parser.add_argument(
        '--run-now',
        metavar='SPORT',
        help='Run one sync for SPORT (or "all") and exit'
    )
    parser.add_argument(
        '--create-tables',
        action='store_true',
        help='Create the races and series tables before starting'
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = Settings.from_env()
    setup_logging(settings.log_level)

    if args.create_tables:
        dynamodb = boto3.resource(
            'dynamodb',
            region_name=settings.aws_region,
            endpoint_url=settings.dynamodb_endpoint_url
        )
        create_tables(dynamodb, settings.races_table_name, settings.series_table_name)

    scheduler = SyncScheduler(
        orchestrator_factory=lambda: build_orchestrator(settings),
        active=settings.is_active,
        environment=settings.app_env,
    )

    if args.run_now:
        return 0 if scheduler.run_now(args.run_now.lower()) is not None else 1

    if not scheduler.start():
        return 0

    stop = threading.Event()
    signal.signal(signal.SIGTERM, lambda signum, frame: stop.set())
    signal.signal(signal.SIGINT, lambda signum, frame: stop.set())

    logger.info("Scheduler running", extra=scheduler.status())
    stop.wait()
    scheduler.shutdown(wait=True)
    return 0


if __name__ == '__main__':
    sys.exit(main())
