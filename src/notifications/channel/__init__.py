"""Channel adapter registry — customer notification channels.

Uses the fake SMS adapter unless another one is installed with set_sms_channel().
"""

from notifications.channel.sms_port import SMSPort

_sms_channel: SMSPort | None = None


def get_sms_channel() -> SMSPort:
    """Return the configured SMS adapter (singleton)."""
    global _sms_channel
    if _sms_channel is None:
        from notifications.channel.fake_sms import FakeSMSAdapter

        _sms_channel = FakeSMSAdapter()
    return _sms_channel


def set_sms_channel(channel: SMSPort) -> None:
    global _sms_channel
    _sms_channel = channel


def reset_channels():
    """Reset channel singletons (useful for testing)."""
    global _sms_channel
    _sms_channel = None
