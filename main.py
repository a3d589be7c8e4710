import time
import logging
import signal
import sys
import argparse

from core.config_loader import load_config
from core.app_context import AppContext
from database.database import configure_database
from database.init_db import init_db
from pipeline import run_matching_pipeline, run_user_matching, run_digest_pipeline

logger = logging.getLogger(__name__)

# Global flag for graceful shutdown
running = True

def signal_handler(sig, frame):
    global running
    logger.info("Shutdown signal received")
    running = False


def build_context(config_path: str) -> AppContext:
    config = load_config(config_path)
    configure_database(config.database.url)
    return AppContext.build(config)


def cmd_init_db(args) -> int:
    config = load_config(args.config)
    configure_database(config.database.url)
    init_db()
    return 0


def cmd_match(args) -> int:
    ctx = build_context(args.config)
    try:
        result = run_user_matching(ctx, args.user_id)
    finally:
        ctx.close()

    if not result.success:
        logger.error(f"Matching for user {args.user_id} failed: {result.error}")
        return 1
    logger.info(
        f"User {args.user_id}: {result.saved_count} matches saved, "
        f"{result.notified_count} notifications queued"
    )
    return 0


def cmd_match_all(args) -> int:
    ctx = build_context(args.config)
    try:
        result = run_matching_pipeline(ctx)
    finally:
        ctx.close()
    return 0 if result.success else 1


def cmd_digest(args) -> int:
    ctx = build_context(args.config)
    try:
        result = run_digest_pipeline(ctx)
    finally:
        ctx.close()
    logger.info(f"Digest: {result.sent_count} sent, {result.failed_count} failed")
    return 0 if result.success else 1


def run_cycle(ctx: AppContext, run_digest: bool) -> None:
    """One scheduled cycle: match every user, then send the digest."""
    cycle_start = time.time()

    result = run_matching_pipeline(ctx)
    logger.info(
        f"Matching: {result.users_count} users, {result.saved_count} matches saved, "
        f"{result.notified_count} notifications queued, {result.failed_count} users failed"
    )

    if run_digest and running:
        run_digest_pipeline(ctx)

    cycle_elapsed = time.time() - cycle_start
    logger.info(f"=== Cycle Completed in {cycle_elapsed:.2f}s ===")


def cmd_schedule(args) -> int:
    # Initialize DB (with retry logic)
    config = load_config(args.config)
    configure_database(config.database.url)
    init_db()

    ctx = AppContext.build(config)
    interval = config.schedule.interval_seconds

    cycle_count = 0
    try:
        while running:
            cycle_count += 1
            cycle_start = time.time()
            logger.info(f"=== Starting Cycle #{cycle_count} ===")
            try:
                run_cycle(ctx, run_digest=config.schedule.run_daily_digest)
            except Exception as e:
                logger.error(f"Error in main loop: {e}", exc_info=True)

            cycle_elapsed = time.time() - cycle_start
            if running:
                logger.info(f"=== Cycle #{cycle_count} completed in {cycle_elapsed:.2f}s. Sleeping for {interval} seconds... ===")
                # Sleep in chunks to allow responsive shutdown
                for _ in range(max(1, interval // 5)):
                    if not running: break
                    time.sleep(5)
    finally:
        ctx.close()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="TenderScout Matching Driver")
    parser.add_argument('--config', type=str, default='config.yaml',
                        help='Path to config.yaml (default: config.yaml)')
    parser.add_argument('--verbose', action='store_true')

    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('init-db', help='Create database tables').set_defaults(func=cmd_init_db)

    match_parser = subparsers.add_parser('match', help='Match one user against active tenders')
    match_parser.add_argument('--user-id', required=True)
    match_parser.set_defaults(func=cmd_match)

    subparsers.add_parser('match-all', help='Match every profiled user').set_defaults(func=cmd_match_all)
    subparsers.add_parser('digest', help='Send the daily tender digest').set_defaults(func=cmd_digest)
    subparsers.add_parser('schedule', help='Run matching and digest on an interval').set_defaults(func=cmd_schedule)

    return parser


def main(argv=None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    logger.info(f"TenderScout driver starting: {args.command}")
    return args.func(args)

if __name__ == "__main__":
    sys.exit(main())
