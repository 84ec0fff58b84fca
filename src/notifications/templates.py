"""Order status message templates (Cantonese, phone-first).

The shop does not collect customer email; every status update goes out as a
short text message. Statuses without a template send nothing.
"""

import os

BRAND = os.environ.get("NOTIFICATION_BRAND", "FridgeLink")

PENDING_WAYBILL = "（處理中）"

STATUS_TEMPLATES: dict[str, str] = {
    "paid": "{brand}: 收到你嘅訂單 {order_id}！我哋正準備處理，請耐心等候。",
    "processing": "{brand}: 你嘅訂單 {order_id} 已經開始處理，我哋會盡快安排出貨。",
    "ready_for_pickup": "{brand}: 貨品已打包！順豐單號為 {waybill_no}，好快會送到你手上。",
    "shipping": "{brand}: 順豐哥哥已經攞咗你件貨喇，單號 {waybill_no}，留意收件。",
    "completed": "{brand}: 順豐顯示你已經收到貨。多謝支持！",
}


def render_status_message(status: str, order_id: str, waybill_no: str | None = None) -> str | None:
    template = STATUS_TEMPLATES.get(status)
    if template is None:
        return None
    return template.format(brand=BRAND, order_id=order_id, waybill_no=waybill_no or PENDING_WAYBILL)
