"""Fake SMS adapter — records outgoing order notifications for tests."""

from uuid import uuid4

from notifications.channel.sms_port import SMSPort, SMSReceipt


class FakeSMSAdapter(SMSPort):
    """SMS adapter that keeps messages in memory instead of sending them."""

    def __init__(self):
        self.sent_messages: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "SMS delivery failed"

    def configure(self, should_succeed: bool = True, failure_reason: str = "SMS delivery failed"):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def send(self, to: str, body: str) -> SMSReceipt:
        if not self.should_succeed:
            return SMSReceipt(status="failed", error=self.failure_reason)

        message_id = f"sms-{uuid4().hex[:12]}"
        self.sent_messages.append({"message_id": message_id, "to": to, "body": body})
        return SMSReceipt(status="sent", message_id=message_id)

    def messages_to(self, phone: str) -> list[str]:
        return [m["body"] for m in self.sent_messages if m["to"] == phone]
