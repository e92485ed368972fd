"""
Payment completion event.

Logical fields the ledger needs from a verified payment. The wire format
belongs to the payment-verification collaborator.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class PaymentEvent:
    """Completed payment, immutable once observed."""

    payment_id: str
    amount: Decimal | int | float | str
    currency: str
    referral_code: str | None = None
    occurred_at: datetime | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "PaymentEvent":
        """
        Build event from an inbound payload.

        Accepts ``referral_code`` at the top level or inside ``metadata``.

        Args:
            payload: Dict with payment_id, amount, currency, referral_code?

        Returns:
            PaymentEvent

        Raises:
            KeyError: payment_id or amount missing
        """
        metadata = payload.get("metadata") or {}
        referral_code = payload.get("referral_code") or metadata.get("referral_code")

        return cls(
            payment_id=str(payload["payment_id"]),
            amount=payload["amount"],
            currency=payload.get("currency") or "",
            referral_code=referral_code,
            occurred_at=payload.get("occurred_at"),
        )
