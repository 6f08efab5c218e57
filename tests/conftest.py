import pytest

from mailkit.email.types import Address, MessageModel
from tests.fakes import RecordingSender


@pytest.fixture
def recording_sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture
def message() -> MessageModel:
    return MessageModel(
        from_=Address.of("sender@example.com", "Sender"),
        to=[Address.of("ada@example.com", "Ada")],
        bcc=[Address.of("audit@example.com")],
        subject="Report",
        plain_body="See attached.",
    )
