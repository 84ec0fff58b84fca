"""Carrier message digest.

Both directions of the SF Express protocol are signed the same way:

    msgDigest = base64(md5(msgData + timestamp + checkword))

with every part encoded as UTF-8.
"""

import base64
import hashlib
import hmac
import secrets
import time


def compute_digest(msg_data: str, timestamp: str, checkword: str) -> str:
    raw = (msg_data + timestamp + checkword).encode("utf-8")
    return base64.b64encode(hashlib.md5(raw).digest()).decode("ascii")


def verify_digest(msg_data: str, timestamp: str, checkword: str, received_digest: str) -> bool:
    """Recompute the digest and compare it to ``received_digest`` in constant time."""
    if not received_digest:
        return False
    expected = compute_digest(msg_data, timestamp, checkword)
    return hmac.compare_digest(expected.encode("ascii"), received_digest.encode("utf-8"))


def new_request_id() -> str:
    """Fresh per-attempt request id, e.g. ``sf_1700000000000_k3j9x2a``."""
    return f"sf_{int(time.time() * 1000)}_{secrets.token_hex(4)[:7]}"


def build_envelope(
    msg_data: str,
    partner_id: str,
    service_code: str,
    checkword: str,
    request_id: str | None = None,
    timestamp: str | None = None,
) -> dict[str, str]:
    """Sign ``msg_data`` and wrap it in the form-encoded request envelope."""
    timestamp = timestamp or str(int(time.time() * 1000))
    return {
        "partnerID": partner_id,
        "requestID": request_id or new_request_id(),
        "serviceCode": service_code,
        "timestamp": timestamp,
        "msgData": msg_data,
        "msgDigest": compute_digest(msg_data, timestamp, checkword),
    }
