"""
Notification Module

Email and SMS delivery for high-priority tender matches and the daily
digest, with every attempt recorded as a Notification row.

Usage:
    from notification import ChannelDispatcher, build_notification_queue

    dispatcher = ChannelDispatcher(timeout_seconds=30)
    queue = build_notification_queue(config.notifications, store, dispatcher)
    queue.enqueue(request)

    # Get a channel
    channel = NotificationChannelFactory.get_channel('email')
    channel.send('user@example.com', 'Subject', 'Body', {})
"""

from notification.channels import (
    NotificationChannel,
    EmailChannel,
    SmsChannel,
    NotificationChannelFactory,
)

from notification.message_builder import (
    NotificationMessageBuilder,
    DigestMatch,
    DigestMessage,
)

from notification.service import (
    ChannelDispatcher,
    LocalNotificationQueue,
    RedisNotificationQueue,
    build_notification_queue,
    deliver_notification,
    process_notification_task,
)

from notification.digest import DigestService, DigestRunResult

__all__ = [
    # Channels
    'NotificationChannel',
    'EmailChannel',
    'SmsChannel',
    'NotificationChannelFactory',
    # Messages
    'NotificationMessageBuilder',
    'DigestMatch',
    'DigestMessage',
    # Delivery
    'ChannelDispatcher',
    'LocalNotificationQueue',
    'RedisNotificationQueue',
    'build_notification_queue',
    'deliver_notification',
    'process_notification_task',
    # Digest
    'DigestService',
    'DigestRunResult',
]
