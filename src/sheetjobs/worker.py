"""
Standalone Worker Process

Runs one JobWorker in a polling loop, without Celery. Useful when the Redis
backend is shared by several worker processes that should pick up jobs as
soon as they are enqueued, or for local runs.

Usage:
    sheetjobs-worker --type csv
    WORKER_TYPE=excel sheetjobs-worker

Stops on SIGINT / SIGTERM after the job in progress is finished.
"""

import argparse
import logging
import os
import signal
import threading
from typing import List, Optional

from sheetjobs.config import configure_logging, get_settings
from sheetjobs.container import build_worker
from sheetjobs.domain.jobs.job import QueueType

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Process jobs of one queue type until stopped",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # CSV worker
  sheetjobs-worker --type csv

  # Spreadsheet worker polling every 5 seconds
  sheetjobs-worker --type excel --poll-interval 5
        """,
    )
    parser.add_argument(
        "--type",
        dest="queue_type",
        choices=[queue_type.value for queue_type in QueueType],
        default=os.getenv("WORKER_TYPE"),
        help="Queue type to serve (default: WORKER_TYPE env var)",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=None,
        help="Seconds to sleep when the queue is empty (default: WORKER_POLL_INTERVAL)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: LOG_LEVEL)",
    )

    args = parser.parse_args(argv)
    if args.queue_type not in {queue_type.value for queue_type in QueueType}:
        parser.error("worker type is required: use --type csv|excel or set WORKER_TYPE")
    return args


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point of the sheetjobs-worker console script."""
    args = parse_args(argv)
    configure_logging(args.log_level)

    settings = get_settings()
    poll_interval = args.poll_interval if args.poll_interval is not None else settings.worker_poll_interval

    worker = build_worker(QueueType(args.queue_type))
    stop_event = threading.Event()

    def _stop(signum, frame) -> None:
        logger.info(f"[{worker.name}] Received signal {signum}, stopping after current job")
        stop_event.set()

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)

    if not worker.queue.ping():
        logger.warning(f"[{worker.name}] Queue backend not answering PING, polling will back off until it does")

    worker.run_forever(poll_interval=poll_interval, stop_event=stop_event)


if __name__ == "__main__":
    main()
