"""
Notification service module.

Usage:
    from affiliate_ledger.services.notification import EmailEventsDispatcher

    async with EmailEventsDispatcher(url, token) as dispatcher:
        ok = await dispatcher.send(payload)
"""

from affiliate_ledger.services.notification.dispatcher import (
    EmailEventsDispatcher,
    ExpiryNotificationPayload,
    NotificationDispatcher,
)

__all__ = [
    "EmailEventsDispatcher",
    "ExpiryNotificationPayload",
    "NotificationDispatcher",
]
