from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class NotificationMessage:
    """Plain-text payload handed to the delivery channel."""

    recipient_id: str
    body: str
