"""Delivery method → carrier product type.

Every delivery goes out through the same cold-chain service, so the lookup
is a single table. Signing and payload code only ever call
express_type_for(); swap the table here to route differently.
"""

from ordering.shipping.fees import DeliveryMethod

# SF product type for chilled/frozen parcels
COLD_CHAIN_EXPRESS_TYPE = "2"

_EXPRESS_TYPES: dict[DeliveryMethod, str] = {
    DeliveryMethod.HOME: COLD_CHAIN_EXPRESS_TYPE,
    DeliveryMethod.LOCKER: COLD_CHAIN_EXPRESS_TYPE,
}


def express_type_for(delivery_method: DeliveryMethod | str, override: str | None = None) -> str:
    if override:
        return override
    return _EXPRESS_TYPES[DeliveryMethod(delivery_method)]
