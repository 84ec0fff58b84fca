"""Fake carrier adapter — deterministic SF stand-in for testing and development.

Issues mock waybill numbers and signs/verifies with a fixed checkword.
Individual orders can be made to fail or time out to exercise partial batch
failures.
"""

import json
from itertools import count

from ordering.carrier.port import CarrierPort, ShipmentResult
from ordering.carrier.settings import CarrierSettings
from ordering.carrier.signing import build_envelope, verify_digest

FAKE_CHECKWORD = "fake-checkword"

FAKE_SETTINGS = CarrierSettings(
    partner_id="FAKE_PARTNER",
    checkword=FAKE_CHECKWORD,
    api_url="https://fake-carrier.example.com/std/service",
    monthly_card="7551234567",
    sender_name="FridgeLink Warehouse",
    sender_phone="85223456789",
    sender_address="Kwai Chung Cold Store, 18 Kwai Fung Crescent",
)


class FakeCarrier(CarrierPort):
    """Fake carrier that always succeeds by default."""

    def __init__(self, settings: CarrierSettings | None = None):
        self.settings = settings or FAKE_SETTINGS
        self.should_succeed = True
        self.failure_reason = "Carrier unavailable"
        self.fail_for: set[str] = set()
        self.timeout_for: set[str] = set()
        self.calls: list[dict] = []
        self._sequence = count(1)

    def configure(self, should_succeed: bool = True, failure_reason: str = "Carrier unavailable"):
        """Configure the fake carrier behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_order(self, payload: dict) -> ShipmentResult:
        envelope = build_envelope(
            json.dumps(payload, ensure_ascii=False, separators=(",", ":")),
            partner_id=self.settings.partner_id,
            service_code=self.settings.service_code,
            checkword=self.settings.checkword,
        )
        order_id = payload.get("orderId")
        self.calls.append({"method": "create_order", "order_id": order_id, "envelope": envelope})
        request_id = envelope["requestID"]

        if order_id in self.timeout_for:
            return ShipmentResult(success=False, request_id=request_id, error="Carrier request timed out")

        if not self.should_succeed or order_id in self.fail_for:
            raw_body = json.dumps({"apiResultCode": "A1001", "apiErrorMsg": self.failure_reason})
            return ShipmentResult(
                success=False,
                request_id=request_id,
                http_status=200,
                raw_body=raw_body,
                error=self.failure_reason,
            )

        waybill_no = f"SF{next(self._sequence):010d}"
        raw_body = json.dumps(
            {
                "apiResultCode": "A1000",
                "apiResultData": json.dumps(
                    {"success": True, "msgData": {"waybillNoInfoList": [{"waybillNo": waybill_no}]}}
                ),
            }
        )
        return ShipmentResult(
            success=True,
            request_id=request_id,
            waybill_no=waybill_no,
            http_status=200,
            raw_body=raw_body,
        )

    def verify_route_push(self, msg_data: str, timestamp: str, msg_digest: str) -> bool:
        return verify_digest(msg_data, timestamp, self.settings.checkword, msg_digest)

    @property
    def dispatched_order_ids(self) -> list[str]:
        return [call["order_id"] for call in self.calls if call["method"] == "create_order"]
