"""Tests for the SF Express adapter with a stubbed HTTP session."""

import json
from dataclasses import replace
from unittest.mock import MagicMock

import requests
from ordering.carrier.fake_adapter import FAKE_SETTINGS
from ordering.carrier.settings import CarrierSettings
from ordering.carrier.sf_adapter import SfExpressCarrier
from ordering.carrier.signing import compute_digest

PAYLOAD = {"orderId": "ord-1", "language": "zh-HK"}


def _response(status_code=200, body=None, text=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = text if text is not None else json.dumps(body or {})
    return response


def _carrier(response=None, side_effect=None, settings=FAKE_SETTINGS):
    session = MagicMock()
    session.post.return_value = response
    session.post.side_effect = side_effect
    return SfExpressCarrier(settings=settings, session=session), session


SUCCESS_BODY = {
    "apiResultCode": "A1000",
    "apiResultData": json.dumps({"success": True, "msgData": {"waybillNoInfoList": [{"waybillNo": "SF7444400000001"}]}}),
}


class TestCreateOrder:
    def test_success_returns_waybill(self):
        carrier, _ = _carrier(_response(body=SUCCESS_BODY))
        result = carrier.create_order(PAYLOAD)
        assert result.success is True
        assert result.waybill_no == "SF7444400000001"
        assert result.http_status == 200
        assert result.request_id.startswith("sf_")

    def test_posts_signed_form_envelope(self):
        carrier, session = _carrier(_response(body=SUCCESS_BODY))
        carrier.create_order(PAYLOAD)

        url = session.post.call_args.args[0]
        kwargs = session.post.call_args.kwargs
        envelope = kwargs["data"]
        assert url == FAKE_SETTINGS.api_url
        assert kwargs["timeout"] == FAKE_SETTINGS.timeout_seconds
        assert envelope["partnerID"] == FAKE_SETTINGS.partner_id
        assert envelope["serviceCode"] == FAKE_SETTINGS.service_code
        assert json.loads(envelope["msgData"]) == PAYLOAD
        assert envelope["msgDigest"] == compute_digest(
            envelope["msgData"], envelope["timestamp"], FAKE_SETTINGS.checkword
        )

    def test_timeout(self):
        carrier, _ = _carrier(side_effect=requests.Timeout("slow"))
        result = carrier.create_order(PAYLOAD)
        assert result.success is False
        assert result.error == "Carrier request timed out"
        assert result.http_status is None

    def test_connection_error(self):
        carrier, _ = _carrier(side_effect=requests.ConnectionError("refused"))
        result = carrier.create_order(PAYLOAD)
        assert result.success is False
        assert "refused" in result.error

    def test_non_2xx(self):
        carrier, _ = _carrier(_response(status_code=502, text="Bad Gateway"))
        result = carrier.create_order(PAYLOAD)
        assert result.success is False
        assert result.http_status == 502
        assert result.raw_body == "Bad Gateway"

    def test_non_json_body(self):
        carrier, _ = _carrier(_response(text="<html>maintenance</html>"))
        result = carrier.create_order(PAYLOAD)
        assert result.success is False
        assert result.error == "Carrier returned a non-JSON response"

    def test_business_error_without_waybill(self):
        body = {"apiResultCode": "A1000", "apiResultData": json.dumps({"success": False, "errorMsg": "地址不詳"})}
        carrier, _ = _carrier(_response(body=body))
        result = carrier.create_order(PAYLOAD)
        assert result.success is False
        assert result.error == "地址不詳"
        assert result.raw_body

    def test_missing_credentials_never_calls_the_network(self):
        carrier, session = _carrier(settings=CarrierSettings())
        result = carrier.create_order(PAYLOAD)
        assert result.success is False
        assert "not configured" in result.error
        session.post.assert_not_called()

    def test_each_attempt_gets_a_fresh_request_id(self):
        carrier, _ = _carrier(_response(body=SUCCESS_BODY))
        first = carrier.create_order(PAYLOAD)
        second = carrier.create_order(PAYLOAD)
        assert first.request_id != second.request_id


class TestVerifyRoutePush:
    def test_valid_digest(self):
        carrier, _ = _carrier()
        digest = compute_digest('{"mailNo":"SF1"}', "1700000000000", FAKE_SETTINGS.checkword)
        assert carrier.verify_route_push('{"mailNo":"SF1"}', "1700000000000", digest) is True

    def test_tampered_body(self):
        carrier, _ = _carrier()
        digest = compute_digest('{"mailNo":"SF1"}', "1700000000000", FAKE_SETTINGS.checkword)
        assert carrier.verify_route_push('{"mailNo":"SF2"}', "1700000000000", digest) is False

    def test_without_checkword(self):
        carrier, _ = _carrier(settings=replace(FAKE_SETTINGS, checkword=""))
        digest = compute_digest("{}", "1", "")
        assert carrier.verify_route_push("{}", "1", digest) is False


class TestSettingsFromEnv:
    def test_reads_primary_and_alias_names(self, monkeypatch):
        monkeypatch.setenv("SF_CLIENT_CODE", "PARTNER")
        monkeypatch.delenv("SF_PARTNER_ID", raising=False)
        monkeypatch.setenv("SF_CHECKWORD", "cw")
        monkeypatch.setenv("SF_MONTHLY_CARD", "7551234567")
        monkeypatch.setenv("SF_TIMEOUT_SECONDS", "5")
        settings = CarrierSettings.from_env()
        assert settings.partner_id == "PARTNER"
        assert settings.checkword == "cw"
        assert settings.monthly_card == "7551234567"
        assert settings.timeout_seconds == 5.0
        assert settings.has_credentials is True

    def test_blank_values_fall_back_to_defaults(self, monkeypatch):
        monkeypatch.setenv("SF_API_URL", "  ")
        monkeypatch.setenv("SF_SENDER_REGION", "")
        settings = CarrierSettings.from_env()
        assert settings.api_url == CarrierSettings().api_url
        assert settings.sender_region == "香港"
