import pytest
from notifications.channel import set_sms_channel
from notifications.channel.fake_sms import FakeSMSAdapter


@pytest.fixture()
def sms():
    fake = FakeSMSAdapter()
    set_sms_channel(fake)
    return fake
