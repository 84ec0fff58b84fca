"""Carrier response parsing — pull the waybill out of an order-creation reply.

SF nests the business result in ``apiResultData``, which arrives either as a
JSON string or an already-decoded object. Older endpoints put the waybill at
the top level or inside a ``msgData`` string.
"""

import json


def _decode(value) -> dict | None:
    if isinstance(value, dict):
        return value
    if isinstance(value, str) and value.strip():
        try:
            decoded = json.loads(value)
        except ValueError:
            return None
        return decoded if isinstance(decoded, dict) else None
    return None


def _waybill_from_result(data: dict) -> str | None:
    msg_data = _decode(data.get("msgData")) or {}
    waybill_infos = msg_data.get("waybillNoInfoList") or []
    if waybill_infos and isinstance(waybill_infos[0], dict) and waybill_infos[0].get("waybillNo"):
        return str(waybill_infos[0]["waybillNo"])
    if msg_data.get("waybillNo"):
        return str(msg_data["waybillNo"])
    waybill_list = msg_data.get("waybillList") or []
    if waybill_list and isinstance(waybill_list[0], dict) and waybill_list[0].get("waybillNo"):
        return str(waybill_list[0]["waybillNo"])
    if data.get("waybillNo"):
        return str(data["waybillNo"])
    return None


def extract_waybill(body: dict) -> str | None:
    """Return the waybill number from a decoded carrier response, or None."""
    api_result = _decode(body.get("apiResultData"))
    if api_result:
        waybill = _waybill_from_result(api_result)
        if waybill:
            return waybill
    return _waybill_from_result(body)


def api_error_message(body: dict) -> str | None:
    """Return the carrier's error text when the envelope or business result failed."""
    if body.get("apiResultCode") not in (None, "A1000"):
        return body.get("apiErrorMsg") or f"apiResultCode {body.get('apiResultCode')}"
    api_result = _decode(body.get("apiResultData")) or {}
    if api_result.get("success") is False:
        return api_result.get("errorMsg") or f"errorCode {api_result.get('errorCode')}"
    return None
