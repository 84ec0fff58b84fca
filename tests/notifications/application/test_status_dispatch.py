from unittest.mock import MagicMock

from notifications.channel import get_sms_channel, reset_channels, set_sms_channel
from notifications.channel.fake_sms import FakeSMSAdapter
from notifications.dispatch import notify_order_status


class TestNotifyOrderStatus:
    def test_sends_rendered_message(self, sms):
        receipt = notify_order_status("completed", "ord-1", "85291234567", "SF1")

        assert receipt.sent is True
        assert receipt.message_id.startswith("sms-")
        assert sms.sent_messages[0]["to"] == "85291234567"

    def test_no_template_sends_nothing(self, sms):
        assert notify_order_status("abnormal", "ord-1", "85291234567") is None
        assert sms.sent_messages == []

    def test_no_phone_sends_nothing(self, sms):
        assert notify_order_status("paid", "ord-1", None) is None
        assert notify_order_status("paid", "ord-1", "") is None
        assert sms.sent_messages == []

    def test_failed_delivery_returns_receipt(self, sms):
        sms.configure(should_succeed=False, failure_reason="Number unreachable")
        receipt = notify_order_status("paid", "ord-1", "85291234567")
        assert receipt.sent is False
        assert receipt.error == "Number unreachable"

    def test_channel_exception_is_swallowed(self):
        broken = MagicMock()
        broken.send.side_effect = TimeoutError("gateway timeout")
        set_sms_channel(broken)
        assert notify_order_status("paid", "ord-1", "85291234567") is None


class TestChannelRegistry:
    def test_defaults_to_fake_adapter(self):
        reset_channels()
        assert isinstance(get_sms_channel(), FakeSMSAdapter)

    def test_singleton_until_reset(self):
        reset_channels()
        first = get_sms_channel()
        assert get_sms_channel() is first
        reset_channels()
        assert get_sms_channel() is not first
