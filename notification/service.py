#!/usr/bin/env python3
"""
Notification Delivery - dispatch, record and queue outbound messages.

Every delivery follows the same three steps, whichever queue runs it:
1. Create a 'pending' Notification record
2. Send through the channel, bounded by a timeout
3. Mark the record 'sent' (with sent_at) or 'failed' (with an error)

Queues:
- LocalNotificationQueue: in-process thread pool
- RedisNotificationQueue: RQ 'notifications' queue, run by notification.worker

Usage:
    from notification.service import ChannelDispatcher, build_notification_queue

    dispatcher = ChannelDispatcher(timeout_seconds=30)
    queue = build_notification_queue(config.notifications, store, dispatcher)
    queue.enqueue(request)
"""

import os
import logging
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from datetime import datetime, timezone
from threading import Lock
from typing import Optional, Dict, Any

from redis import Redis
from rq import Queue

from core.config_loader import NotificationConfig
from core.exceptions import NotificationDispatchException
from core.matcher.dto import NotificationRequest, STATUS_SENT, STATUS_FAILED
from core.matcher.interfaces import NotificationDispatcher, NotificationQueue, NotificationStore
from notification.channels import NotificationChannelFactory

logger = logging.getLogger(__name__)

NOTIFICATION_QUEUE_NAME = 'notifications'
DEFAULT_REDIS_URL = 'redis://localhost:6379/0'


class ChannelDispatcher(NotificationDispatcher):
    """
    Sends messages through NotificationChannelFactory channels.

    Channels are built with timeout_seconds so SMTP and Twilio calls carry
    their own network timeout. Each send also runs on its own daemon thread
    that the caller stops waiting for after timeout_seconds; a send that
    outlives it is reported as a failure and holds no shared worker slot.
    """

    def __init__(
        self,
        timeout_seconds: float = 30.0,
        base_url: Optional[str] = None,
        channel_factory=NotificationChannelFactory
    ):
        self.timeout_seconds = timeout_seconds
        self.base_url = base_url
        self.channel_factory = channel_factory

    def send(
        self,
        channel: str,
        recipient: str,
        subject: Optional[str],
        body: str,
        metadata: Optional[dict] = None
    ) -> bool:
        metadata = dict(metadata or {})
        if self.base_url and 'base_url' not in metadata:
            metadata['base_url'] = self.base_url

        try:
            return self._send_with_timeout(channel, recipient, subject, body, metadata)
        except NotificationDispatchException as e:
            logger.error(f"Dispatch via {channel} failed: {e}")
            return False

    def _send_with_timeout(
        self,
        channel_type: str,
        recipient: str,
        subject: Optional[str],
        body: str,
        metadata: Dict[str, Any]
    ) -> bool:
        try:
            channel = self.channel_factory.get_channel(channel_type, timeout_seconds=self.timeout_seconds)
        except ValueError as e:
            raise NotificationDispatchException(str(e)) from e

        outcome: Dict[str, Any] = {}

        def run_send():
            try:
                outcome['sent'] = channel.send(recipient, subject, body, metadata)
            except Exception as e:
                outcome['error'] = e

        worker = threading.Thread(target=run_send, name=f'dispatch-{channel_type}', daemon=True)
        worker.start()
        worker.join(self.timeout_seconds)

        if worker.is_alive():
            raise NotificationDispatchException(
                f"{channel_type} send timed out after {self.timeout_seconds}s"
            )
        if 'error' in outcome:
            error = outcome['error']
            raise NotificationDispatchException(f"{channel_type} send raised: {error}") from error
        return bool(outcome.get('sent'))


def deliver_notification(
    request: NotificationRequest,
    store: NotificationStore,
    dispatcher: NotificationDispatcher
) -> bool:
    """
    Record, send and finalize one notification.

    Never raises; every failure is logged and reflected in the record
    status where a record exists.

    Returns:
        True if the message was sent
    """
    try:
        notification_id = store.create_notification(request)
    except Exception as e:
        logger.error(f"Could not record {request.channel} notification for user {request.user_id}: {e}")
        return False

    error_message = None
    try:
        success = dispatcher.send(
            request.channel,
            request.recipient,
            request.subject,
            request.body,
            request.metadata,
        )
        if not success:
            error_message = f"{request.channel} dispatch failed"
    except Exception as e:
        success = False
        error_message = str(e)

    try:
        if success:
            store.update_notification_status(
                notification_id, STATUS_SENT, sent_at=datetime.now(timezone.utc)
            )
            logger.info(f"Notification {notification_id} sent via {request.channel}")
        else:
            store.update_notification_status(
                notification_id, STATUS_FAILED, error_message=error_message
            )
            logger.error(f"Notification {notification_id} failed via {request.channel}: {error_message}")
    except Exception as e:
        logger.error(f"Could not update status of notification {notification_id}: {e}")

    return success


class LocalNotificationQueue(NotificationQueue):
    """Runs deliveries on an in-process thread pool."""

    def __init__(
        self,
        store: NotificationStore,
        dispatcher: NotificationDispatcher,
        max_workers: int = 4
    ):
        self.store = store
        self.dispatcher = dispatcher
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='notify')
        self._pending = set()
        self._lock = Lock()

    def enqueue(self, request: NotificationRequest) -> Optional[str]:
        task_id = str(uuid.uuid4())
        future = self._executor.submit(deliver_notification, request, self.store, self.dispatcher)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._discard)
        logger.debug(f"Queued {request.channel} notification {task_id} for user {request.user_id}")
        return task_id

    def _discard(self, future) -> None:
        with self._lock:
            self._pending.discard(future)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until queued deliveries finish.

        Returns:
            True if nothing is left pending
        """
        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait_futures(pending, timeout=timeout)
        return not not_done

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


class RedisNotificationQueue(NotificationQueue):
    """
    Hands deliveries to RQ workers listening on the 'notifications' queue.

    The dispatch timeout and link base URL travel with each job, so workers
    deliver with the enqueuing process's notification config.
    """

    def __init__(
        self,
        redis_conn: Redis,
        job_timeout_seconds: int = 300,
        queue_name: str = NOTIFICATION_QUEUE_NAME,
        dispatch_timeout_seconds: Optional[float] = None,
        base_url: Optional[str] = None
    ):
        self.redis_conn = redis_conn
        self.job_timeout_seconds = job_timeout_seconds
        self.dispatch_timeout_seconds = dispatch_timeout_seconds
        self.base_url = base_url
        self.queue = Queue(queue_name, connection=redis_conn)

    def enqueue(self, request: NotificationRequest) -> Optional[str]:
        job = self.queue.enqueue(
            process_notification_task,
            request.to_dict(),
            self.dispatch_timeout_seconds,
            self.base_url,
            job_timeout=self.job_timeout_seconds,
            result_ttl=86400
        )
        logger.info(f"Queued {request.channel} notification as job {job.id}")
        return job.id

    def get_queue_status(self) -> Dict[str, Any]:
        try:
            return {
                'status': 'active',
                'queue_length': len(self.queue),
                'redis_connected': self.redis_conn.ping()
            }
        except Exception as e:
            return {'status': 'error', 'error': str(e)}


def build_notification_queue(
    config: NotificationConfig,
    store: NotificationStore,
    dispatcher: NotificationDispatcher
) -> NotificationQueue:
    """
    Pick the queue implementation for the configured mode.

    RQ is used only when enabled in config and Redis answers a ping;
    otherwise deliveries run on the local pool.
    """
    if config.use_async_queue:
        redis_url = config.redis_url or os.environ.get('REDIS_URL', DEFAULT_REDIS_URL)
        try:
            redis_conn = Redis.from_url(redis_url)
            # Validate connection with ping before using
            redis_conn.ping()
            logger.info("Notification queue connected to Redis")
            return RedisNotificationQueue(
                redis_conn,
                job_timeout_seconds=config.job_timeout_seconds,
                dispatch_timeout_seconds=config.dispatch_timeout_seconds,
                base_url=config.base_url
            )
        except Exception as e:
            logger.error(f"Redis connection failed: {e}. Falling back to local delivery.")
    else:
        logger.info("Async queue disabled via config. Using local delivery.")

    return LocalNotificationQueue(store, dispatcher, max_workers=config.max_workers)


# Worker task - must be at module level for RQ
def process_notification_task(
    notification_data: Dict[str, Any],
    dispatch_timeout_seconds: Optional[float] = None,
    base_url: Optional[str] = None
) -> bool:
    """
    Deliver one queued notification (called by the RQ worker).

    The worker builds its own store and dispatcher. Timeout and base URL
    come from the job; NOTIFICATION_DISPATCH_TIMEOUT and FRONTEND_URL only
    fill in for jobs enqueued without them.
    """
    from database.store import SqlMatchingStore

    request = NotificationRequest.from_dict(notification_data)
    if dispatch_timeout_seconds is None:
        dispatch_timeout_seconds = float(os.environ.get('NOTIFICATION_DISPATCH_TIMEOUT', '30'))
    dispatcher = ChannelDispatcher(
        timeout_seconds=dispatch_timeout_seconds,
        base_url=base_url or os.environ.get('FRONTEND_URL')
    )

    logger.info(f"Processing {request.channel} notification for user {request.user_id}")
    return deliver_notification(request, SqlMatchingStore(), dispatcher)
