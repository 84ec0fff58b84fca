"""Loading the admin's order selection."""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.order.order import Order

logger = structlog.get_logger(__name__)


def unique_ids(order_ids: list[str]) -> list[str]:
    """Drop repeated ids, keeping selection order."""
    return list(dict.fromkeys(str(order_id) for order_id in order_ids))


def load_orders(order_ids: list[str]) -> list[Order]:
    """Load the selected orders in selection order. Unknown ids are logged and left out."""
    repo = current_domain.repository_for(Order)
    orders = []
    for order_id in unique_ids(order_ids):
        try:
            orders.append(repo.get(order_id))
        except ObjectNotFoundError:
            logger.warning("Selected order not found", order_id=order_id)
    return orders
