"""SMS channel port — abstract interface for customer phone notifications."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class SMSReceipt:
    status: str  # "sent" or "failed"
    message_id: str | None = None
    error: str | None = None

    @property
    def sent(self) -> bool:
        return self.status == "sent"


class SMSPort(ABC):
    """Abstract interface for SMS dispatch adapters."""

    @abstractmethod
    def send(self, to: str, body: str) -> SMSReceipt:
        """Send a text message to the phone number ``to``."""
        ...
