"""
Notification Module

Delivers "new match" notifications for matches whose expert has not been
notified yet, synchronously or through an RQ queue.

Usage:
    from notification import MatchNotificationDispatcher

    dispatcher = MatchNotificationDispatcher(service, config.notifications)
    dispatcher.dispatch_pending()
"""

from notification.channels import (
    NotificationChannel,
    LogChannel,
    WebhookChannel,
    NotificationChannelFactory,
)

from notification.dispatcher import (
    MatchNotificationDispatcher,
    build_match_payload,
    process_match_notification,
)

__all__ = [
    # Channels
    'NotificationChannel',
    'LogChannel',
    'WebhookChannel',
    'NotificationChannelFactory',
    # Dispatch
    'MatchNotificationDispatcher',
    'build_match_payload',
    'process_match_notification',
]
