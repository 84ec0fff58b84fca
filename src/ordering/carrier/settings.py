"""Carrier (SF Express) settings — read from the environment."""

import os
from dataclasses import dataclass

SF_SANDBOX_URL = "https://sfapi-sbox.sf-express.com/std/service"


def _env(*names: str, default: str = "") -> str:
    for name in names:
        value = os.environ.get(name)
        if value is not None and value.strip():
            return value.strip()
    return default


@dataclass(frozen=True)
class CarrierSettings:
    partner_id: str = ""
    checkword: str = ""
    api_url: str = SF_SANDBOX_URL
    service_code: str = "EXP_RECE_CREATE_ORDER"
    monthly_card: str = ""
    express_type_id: str = ""
    pay_method: int = 1
    language: str = "zh-HK"
    sender_name: str = ""
    sender_phone: str = ""
    sender_address: str = ""
    sender_region: str = "香港"
    sender_city: str = "香港"
    timeout_seconds: float = 10.0
    default_weight_kg: float = 1.0

    @property
    def has_credentials(self) -> bool:
        return bool(self.partner_id and self.checkword)

    @classmethod
    def from_env(cls) -> "CarrierSettings":
        return cls(
            partner_id=_env("SF_PARTNER_ID", "SF_CLIENT_CODE"),
            checkword=_env("SF_CHECKWORD", "SF_CHECK_WORD"),
            api_url=_env("SF_API_URL", default=SF_SANDBOX_URL),
            service_code=_env("SF_SERVICE_CODE", default="EXP_RECE_CREATE_ORDER"),
            monthly_card=_env("SF_MONTHLY_CARD"),
            express_type_id=_env("SF_EXPRESS_TYPE_ID"),
            pay_method=int(_env("SF_PAY_METHOD", default="1")),
            language=_env("SF_LANGUAGE", default="zh-HK"),
            sender_name=_env("SF_SENDER_NAME"),
            sender_phone=_env("SF_SENDER_PHONE"),
            sender_address=_env("SF_SENDER_ADDRESS"),
            sender_region=_env("SF_SENDER_REGION", default="香港"),
            sender_city=_env("SF_SENDER_CITY", default="香港"),
            timeout_seconds=float(_env("SF_TIMEOUT_SECONDS", default="10")),
            default_weight_kg=float(_env("SF_DEFAULT_WEIGHT_KG", default="1.0")),
        )
