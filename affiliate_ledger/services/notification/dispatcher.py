"""
Outbound notification dispatch.

The email/notification collaborator is external and offers no idempotency
of its own; callers get a plain success flag back.
"""

from dataclasses import dataclass
from typing import Any, Protocol

import aiohttp
from loguru import logger

from affiliate_ledger.models.enums import NotificationType


@dataclass(frozen=True)
class ExpiryNotificationPayload:
    """Membership expiry notification request."""

    type: NotificationType
    recipient: str
    name: str
    expiry_date: str
    renewal_url: str
    days_remaining: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the notification endpoint."""
        data: dict[str, Any] = {
            "type": str(self.type),
            "recipient": self.recipient,
            "name": self.name,
            "expiry_date": self.expiry_date,
            "renewal_url": self.renewal_url,
        }
        if self.days_remaining is not None:
            data["days_remaining"] = self.days_remaining
        return data


class NotificationDispatcher(Protocol):
    """Anything that can deliver a notification and report success."""

    async def send(self, payload: ExpiryNotificationPayload) -> bool:
        """Deliver payload; True only if the collaborator accepted it."""
        ...


class EmailEventsDispatcher:
    """
    Posts notifications to the email-events HTTP endpoint.

    Usage:
        async with EmailEventsDispatcher(url, token) as dispatcher:
            await dispatcher.send(payload)
    """

    def __init__(
        self,
        url: str | None,
        token: str | None = None,
        timeout: float = 15.0,
    ) -> None:
        """
        Initialize dispatcher.

        Args:
            url: Endpoint URL
            token: Bearer token
            timeout: Total request timeout in seconds
        """
        self.url = url
        self.token = token
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "EmailEventsDispatcher":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            headers = {"Content-Type": "application/json"}
            if self.token:
                headers["Authorization"] = f"Bearer {self.token}"
            self._session = aiohttp.ClientSession(headers=headers, timeout=self.timeout)
        return self._session

    async def send(self, payload: ExpiryNotificationPayload) -> bool:
        """
        Send notification.

        Args:
            payload: Notification payload

        Returns:
            True if the endpoint answered 2xx
        """
        if not self.url:
            logger.error("Notification endpoint is not configured")
            return False

        try:
            async with self._get_session().post(self.url, json=payload.to_dict()) as resp:
                if resp.status >= 300:
                    body = await resp.text()
                    logger.error(
                        "Notification endpoint rejected request",
                        extra={
                            "status": resp.status,
                            "type": str(payload.type),
                            "body": body[:500],
                        },
                    )
                    return False
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.error(
                "Notification request failed",
                extra={"type": str(payload.type), "error": repr(e)},
            )
            return False

        return True
