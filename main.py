import time
import logging
import signal
import argparse

from core.config_loader import load_config
from core.matcher import ExpertMatchingService
from database.init_db import init_db
from database.uow import matching_uow
from notification import MatchNotificationDispatcher

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Global flag for graceful shutdown
running = True

def signal_handler(sig, frame):
    global running
    logger.info("Shutdown signal received")
    running = False


def run_notification_pass(config):
    """Deliver pending notifications for committed matches, in a unit of work of its own."""
    if not config.notifications.enabled:
        return 0
    with matching_uow() as repo:
        service = ExpertMatchingService(repo, config.matching)
        dispatcher = MatchNotificationDispatcher(service, config.notifications)
        return dispatcher.dispatch_pending()


def run_sweep_cycle(config):
    """One RUSHING sweep, committed, then a notification pass.

    A delivery failure propagates but never rolls back the sweep.
    """
    with matching_uow() as repo:
        service = ExpertMatchingService(repo, config.matching)
        result = service.auto_match_rushing_experts()

    notified = run_notification_pass(config)

    logger.info(
        f"Sweep: {result.matches_created} new matches from {result.experts_processed} rushing experts "
        f"x {result.requests_processed} open requests; {notified} notifications sent"
    )
    return result


def run_request_opened(config, request_id):
    """Match a newly opened request, then sweep rushing experts against it."""
    with matching_uow() as repo:
        service = ExpertMatchingService(repo, config.matching)
        result = service.handle_request_opened(request_id)

    run_notification_pass(config)

    logger.info(
        f"Request {request_id}: {len(result.matches)} matches from the standard run, "
        f"{result.rushing.matches_created} from the rushing sweep"
    )
    return result


def main():
    parser = argparse.ArgumentParser(description="Expert matching scheduler")
    parser.add_argument('--once', action='store_true',
                        help='Run a single rushing sweep and exit')
    parser.add_argument('--request-id', type=str, default=None,
                        help='Run matching for one newly opened service request and exit')
    parser.add_argument('--config', type=str, default='config.yaml')
    args = parser.parse_args()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    config = load_config(args.config)

    # Initialize DB (with retry logic)
    init_db()

    if args.request_id:
        run_request_opened(config, args.request_id)
        return

    if args.once:
        run_sweep_cycle(config)
        return

    interval = config.schedule.rushing_sweep_interval_seconds
    logger.info(f"Rushing sweep scheduler starting, interval {interval}s")

    cycle_count = 0
    while running:
        cycle_count += 1
        cycle_start = time.time()
        logger.info(f"=== Starting Sweep #{cycle_count} ===")
        try:
            run_sweep_cycle(config)
        except Exception as e:
            logger.error(f"Error in sweep loop: {e}", exc_info=True)

        cycle_elapsed = time.time() - cycle_start
        if running:
            logger.info(f"=== Sweep #{cycle_count} completed in {cycle_elapsed:.2f}s. Sleeping for {interval} seconds... ===")
            # Sleep in short chunks to allow responsive shutdown
            for _ in range(max(1, interval)):
                if not running:
                    break
                time.sleep(1)

if __name__ == "__main__":
    main()
