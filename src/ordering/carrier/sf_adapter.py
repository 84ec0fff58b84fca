"""SF Express adapter — signed form-encoded calls to the SF open platform."""

import json

import requests
import structlog

from ordering.carrier.port import CarrierPort, ShipmentResult
from ordering.carrier.response import api_error_message, extract_waybill
from ordering.carrier.settings import CarrierSettings
from ordering.carrier.signing import build_envelope, new_request_id, verify_digest

logger = structlog.get_logger(__name__)

RAW_BODY_LOG_LIMIT = 300


class SfExpressCarrier(CarrierPort):
    def __init__(self, settings: CarrierSettings | None = None, session: requests.Session | None = None):
        self.settings = settings or CarrierSettings.from_env()
        self.session = session or requests.Session()

    def create_order(self, payload: dict) -> ShipmentResult:
        request_id = new_request_id()
        if not self.settings.has_credentials:
            logger.error("SF credentials missing", request_id=request_id)
            return ShipmentResult(
                success=False,
                request_id=request_id,
                error="SF_PARTNER_ID / SF_CHECKWORD not configured",
            )

        envelope = build_envelope(
            json.dumps(payload, ensure_ascii=False, separators=(",", ":")),
            partner_id=self.settings.partner_id,
            service_code=self.settings.service_code,
            checkword=self.settings.checkword,
            request_id=request_id,
        )
        logger.info(
            "Submitting order to SF",
            order_id=payload.get("orderId"),
            request_id=request_id,
            url=self.settings.api_url,
        )

        try:
            response = self.session.post(
                self.settings.api_url,
                data=envelope,
                timeout=self.settings.timeout_seconds,
            )
        except requests.Timeout:
            logger.warning("SF request timed out", request_id=request_id)
            return ShipmentResult(success=False, request_id=request_id, error="Carrier request timed out")
        except requests.RequestException as exc:
            logger.warning("SF request failed", request_id=request_id, error=str(exc))
            return ShipmentResult(success=False, request_id=request_id, error=f"Carrier request failed: {exc}")

        raw_body = response.text
        if not response.ok:
            logger.warning(
                "SF returned an error status",
                request_id=request_id,
                http_status=response.status_code,
                body=raw_body[:RAW_BODY_LOG_LIMIT],
            )
            return ShipmentResult(
                success=False,
                request_id=request_id,
                http_status=response.status_code,
                raw_body=raw_body,
                error=f"Carrier returned HTTP {response.status_code}",
            )

        try:
            body = json.loads(raw_body)
        except ValueError:
            logger.warning("SF returned non-JSON body", request_id=request_id, body=raw_body[:RAW_BODY_LOG_LIMIT])
            return ShipmentResult(
                success=False,
                request_id=request_id,
                http_status=response.status_code,
                raw_body=raw_body,
                error="Carrier returned a non-JSON response",
            )

        waybill_no = extract_waybill(body) if isinstance(body, dict) else None
        if not waybill_no:
            error = (api_error_message(body) if isinstance(body, dict) else None) or "No waybill number in carrier response"
            logger.warning("SF response without waybill", request_id=request_id, error=error)
            return ShipmentResult(
                success=False,
                request_id=request_id,
                http_status=response.status_code,
                raw_body=raw_body,
                error=error,
            )

        logger.info("SF order created", request_id=request_id, waybill_no=waybill_no)
        return ShipmentResult(
            success=True,
            request_id=request_id,
            waybill_no=waybill_no,
            http_status=response.status_code,
            raw_body=raw_body,
        )

    def verify_route_push(self, msg_data: str, timestamp: str, msg_digest: str) -> bool:
        if not self.settings.checkword:
            return False
        return verify_digest(msg_data, timestamp, self.settings.checkword, msg_digest)
