"""Shared matching pipeline runner module.

This module contains the batch entry points used by main.py: match one
user, match every profiled user, and send the daily digest.
"""

import time
import logging
import threading
from typing import Optional, Callable
from dataclasses import dataclass

from core.app_context import AppContext


logger = logging.getLogger(__name__)


@dataclass
class MatchingPipelineResult:
    """Result of running the matching pipeline."""
    success: bool
    users_count: int
    saved_count: int
    notified_count: int
    failed_count: int = 0
    error: Optional[str] = None
    execution_time: float = 0.0


@dataclass
class DigestPipelineResult:
    """Result of running the daily digest."""
    success: bool
    sent_count: int
    failed_count: int
    error: Optional[str] = None
    execution_time: float = 0.0


def run_user_matching(ctx: AppContext, user_id: str) -> MatchingPipelineResult:
    """Match a single user. Persistence errors are reported, not raised."""
    start = time.time()
    try:
        run = ctx.orchestrator.run_matching(user_id)
    except Exception as e:
        logger.error(f"Matching failed for user {user_id}: {e}", exc_info=True)
        return MatchingPipelineResult(
            success=False,
            users_count=1,
            saved_count=0,
            notified_count=0,
            failed_count=1,
            error=str(e),
            execution_time=time.time() - start
        )

    return MatchingPipelineResult(
        success=True,
        users_count=0 if run.skipped else 1,
        saved_count=run.matches_saved,
        notified_count=run.notifications_enqueued,
        error=run.skip_reason,
        execution_time=time.time() - start
    )


def run_matching_pipeline(
    ctx: AppContext,
    stop_event: Optional[threading.Event] = None,
    status_callback: Optional[Callable[[str], None]] = None
) -> MatchingPipelineResult:
    """Run matching for every user with a business profile.

    Args:
        ctx: Application context with config, store and orchestrator
        stop_event: Optional threading event; a set event skips the run
        status_callback: Optional hook receiving stage names

    Returns:
        MatchingPipelineResult with success status and counts
    """
    if stop_event is not None and stop_event.is_set():
        logger.info("=== MATCHING PIPELINE: Skipped (stop requested) ===")
        return MatchingPipelineResult(
            success=True, users_count=0, saved_count=0, notified_count=0,
            error="Stop requested"
        )

    logger.info("=" * 60)
    logger.info("STARTING MATCHING PIPELINE")
    logger.info("=" * 60)

    matching_config = ctx.config.matching
    if not matching_config or not matching_config.enabled:
        logger.info("=== MATCHING PIPELINE: Skipped (disabled in config) ===")
        return MatchingPipelineResult(
            success=True,
            users_count=0,
            saved_count=0,
            notified_count=0,
            error="Matching disabled in config"
        )

    if status_callback:
        status_callback("matching")

    pipeline_start = time.time()
    try:
        batch = ctx.orchestrator.run_matching_for_all_users(max_workers=matching_config.max_workers)
    except Exception as e:
        # Loading the user list failed; per-user failures are absorbed by the batch
        logger.error(f"Matching pipeline failed: {e}", exc_info=True)
        return MatchingPipelineResult(
            success=False,
            users_count=0,
            saved_count=0,
            notified_count=0,
            error=str(e),
            execution_time=time.time() - pipeline_start
        )

    if status_callback:
        status_callback("completed")

    execution_time = time.time() - pipeline_start
    logger.info(f"=== MATCHING PIPELINE: Completed in {execution_time:.2f}s ===")

    return MatchingPipelineResult(
        success=batch.success,
        users_count=batch.users_matched,
        saved_count=batch.matches_saved,
        notified_count=batch.notifications_enqueued,
        failed_count=len(batch.failed_user_ids),
        error=None if batch.success else f"{len(batch.failed_user_ids)} users failed",
        execution_time=execution_time
    )


def run_digest_pipeline(ctx: AppContext) -> DigestPipelineResult:
    """Send the daily digest to every subscribed user."""
    start = time.time()

    if ctx.digest_service is None:
        logger.info("=== DIGEST: Skipped (notifications disabled) ===")
        return DigestPipelineResult(
            success=True, sent_count=0, failed_count=0,
            error="Notifications disabled in config"
        )

    try:
        result = ctx.digest_service.send_daily_digests()
    except Exception as e:
        logger.error(f"Digest pipeline failed: {e}", exc_info=True)
        return DigestPipelineResult(
            success=False, sent_count=0, failed_count=0,
            error=str(e), execution_time=time.time() - start
        )

    return DigestPipelineResult(
        success=result.digests_failed == 0,
        sent_count=result.digests_sent,
        failed_count=result.digests_failed,
        execution_time=time.time() - start
    )
