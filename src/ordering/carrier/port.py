"""Carrier port — abstract interface for the courier integration.

The dispatch pipeline and webhook endpoint program against this port;
adapters are swapped via the CARRIER_ADAPTER setting.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ordering.carrier.settings import CarrierSettings


@dataclass(frozen=True)
class ShipmentResult:
    """Outcome of one order-creation attempt. Adapters never raise for transport errors."""

    success: bool
    request_id: str
    waybill_no: str | None = None
    http_status: int | None = None
    raw_body: str | None = None
    error: str | None = None


class CarrierPort(ABC):
    """Abstract interface for carrier adapters."""

    settings: CarrierSettings

    @abstractmethod
    def create_order(self, payload: dict) -> ShipmentResult:
        """Sign and submit an already validated order-creation payload."""
        ...

    @abstractmethod
    def verify_route_push(self, msg_data: str, timestamp: str, msg_digest: str) -> bool:
        """Return True if an inbound route push carries a valid digest."""
        ...
