import asyncio
import io
import threading

import pytest

from mailkit.core.cancellation import CancellationToken
from mailkit.email import smtp_client
from mailkit.email.builder import EmailBuilder
from mailkit.email.completion import CANCELLED_BEFORE_SEND
from mailkit.email.mime_message import to_email_message
from mailkit.email.senders.smtp_sender import SMTPEmailSender
from mailkit.email.smtp_client import AiosmtplibClient
from mailkit.email.types import Address
from tests.fakes import FakeSmtpClient


class RecordingSMTP:
    """Подмена aiosmtplib.SMTP: запоминает параметры сессии и отправленные письма."""

    instances: list["RecordingSMTP"] = []
    block = False

    def __init__(self, **kwargs) -> None:
        self.kwargs = kwargs
        self.login_args: tuple[str, str] | None = None
        self.sent: list[tuple] = []
        RecordingSMTP.instances.append(self)

    async def __aenter__(self) -> "RecordingSMTP":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    async def login(self, username: str, password: str) -> None:
        self.login_args = (username, password)

    async def send_message(self, message, sender=None, recipients=None) -> None:
        if RecordingSMTP.block:
            await asyncio.sleep(30)
        self.sent.append((message, sender, recipients))


@pytest.fixture
def fake_smtp(monkeypatch):
    RecordingSMTP.instances = []
    RecordingSMTP.block = False
    monkeypatch.setattr(smtp_client.aiosmtplib, "SMTP", RecordingSMTP)
    return RecordingSMTP


def test_sender_success_closes_session_and_uses_envelope(message) -> None:
    client = FakeSmtpClient("success")
    sender = SMTPEmailSender("smtp.test", 587, client_factory=lambda: client)

    result = sender.send(message)

    assert result.succeeded
    assert client.closed
    _, envelope_from, recipients = client.sent[0]
    assert envelope_from == "sender@example.com"
    assert recipients == ["ada@example.com", "audit@example.com"]


@pytest.mark.parametrize("mode", ["fail", "raise"])
def test_sender_reports_failures_as_data_and_closes_session(message, mode) -> None:
    client = FakeSmtpClient(mode)
    sender = SMTPEmailSender("smtp.test", 587, client_factory=lambda: client)

    result = sender.send(message)

    assert not result.succeeded
    assert len(result.errors) == 1
    assert result.errors[0].startswith("Message delivery failed: ")
    assert client.closed


@pytest.mark.asyncio
async def test_sender_opens_new_session_per_send(message) -> None:
    clients: list[FakeSmtpClient] = []

    def factory() -> FakeSmtpClient:
        clients.append(FakeSmtpClient("success"))
        return clients[-1]

    sender = SMTPEmailSender("smtp.test", 25, client_factory=factory)
    await sender.send_async(message)
    await sender.send_async(message)

    assert len(clients) == 2
    assert all(c.closed and len(c.sent) == 1 for c in clients)


@pytest.mark.asyncio
async def test_sender_keeps_pre_send_cancellation_entry(message) -> None:
    token = CancellationToken()
    token.cancel()
    sender = SMTPEmailSender("smtp.test", 25, client_factory=lambda: FakeSmtpClient("success"))

    result = await sender.send_async(message, token)

    assert result.errors == [CANCELLED_BEFORE_SEND]


def test_credentials_must_come_in_pairs() -> None:
    with pytest.raises(ValueError):
        SMTPEmailSender("smtp.test", 25, username="user")
    with pytest.raises(ValueError):
        SMTPEmailSender("smtp.test", 25, password="secret")


def test_to_email_message_builds_headers_bodies_and_attachments(tmp_path, recording_sender) -> None:
    report = tmp_path / "report.pdf"
    report.write_bytes(b"%PDF-1.7")
    builder = (
        EmailBuilder.create("noreply@example.com", recording_sender, "Example")
        .to("ada@example.com", "Ada")
        .cc("cc@example.com")
        .bcc("hidden@example.com")
        .reply_to("help@example.com")
        .subject("Monthly report")
        .plain_body("Plain")
        .html_body("<p>Html</p>")
        .attach(report)
        .attach(io.BytesIO(b"a,b"), "data.csv")
    )

    msg = to_email_message(builder.message)

    assert msg["From"] == "Example <noreply@example.com>"
    assert msg["To"] == "Ada <ada@example.com>"
    assert msg["Cc"] == "cc@example.com"
    assert msg["Reply-To"] == "help@example.com"
    assert msg["Bcc"] is None
    assert msg["Subject"] == "Monthly report"
    assert msg.get_content_type() == "multipart/mixed"
    assert msg.get_body(("plain",)).get_content().strip() == "Plain"
    assert msg.get_body(("html",)).get_content().strip() == "<p>Html</p>"

    attachments = list(msg.iter_attachments())
    assert [a.get_filename() for a in attachments] == ["report.pdf", "data.csv"]
    assert attachments[0].get_content_type() == "application/pdf"
    assert attachments[0].get_content() == b"%PDF-1.7"
    assert attachments[0].get_param("creation-date", header="Content-Disposition")
    assert attachments[1].get_content_type() == "text/csv"


def test_aiosmtplib_client_sends_and_raises_completed(fake_smtp, message) -> None:
    events = []
    done = threading.Event()
    client = AiosmtplibClient("smtp.test", 2525, username="user", password="secret", start_tls=True)
    client.add_send_completed(lambda e: (events.append(e), done.set()))
    state = object()

    client.send(to_email_message(message), "sender@example.com", ["ada@example.com"], state)

    assert done.wait(5)
    client.close()
    event = events[0]
    assert event.user_state is state
    assert not event.cancelled and event.error is None

    session = fake_smtp.instances[0]
    assert session.kwargs["hostname"] == "smtp.test"
    assert session.kwargs["port"] == 2525
    assert session.kwargs["start_tls"] is True
    assert session.login_args == ("user", "secret")
    assert session.sent[0][1:] == ("sender@example.com", ["ada@example.com"])


def test_aiosmtplib_client_cancel_is_acknowledged_by_event(fake_smtp, message) -> None:
    fake_smtp.block = True
    events = []
    done = threading.Event()
    client = AiosmtplibClient("smtp.test", 25)
    client.add_send_completed(lambda e: (events.append(e), done.set()))

    client.send(to_email_message(message), "sender@example.com", ["ada@example.com"], "token")
    client.send_cancel()

    assert done.wait(5)
    client.close()
    assert events[0].cancelled
    assert events[0].user_state == "token"


def test_smtp_sender_end_to_end_over_aiosmtplib_client(fake_smtp, message) -> None:
    message.cc.append(Address.of("cc@example.com"))
    sender = SMTPEmailSender("smtp.test", 25, "user", "secret")

    result = sender.send(message)

    assert result.succeeded
    session = fake_smtp.instances[0]
    assert session.login_args == ("user", "secret")
    assert session.sent[0][2] == ["ada@example.com", "cc@example.com", "audit@example.com"]


@pytest.mark.asyncio
async def test_session_is_closed_off_the_event_loop_thread(message) -> None:
    client = FakeSmtpClient("success")
    sender = SMTPEmailSender("smtp.test", 25, client_factory=lambda: client)

    await sender.send_async(message)

    assert client.closed
    assert client.close_thread is not threading.current_thread()


@pytest.mark.asyncio
async def test_cancelled_send_still_closes_session_off_the_loop(message) -> None:
    client = FakeSmtpClient("custom")
    sender = SMTPEmailSender("smtp.test", 25, client_factory=lambda: client)
    task = asyncio.create_task(sender.send_async(message))
    while not client.sent:
        await asyncio.sleep(0.01)
    await asyncio.sleep(0.01)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert client.cancel_calls == 1
    assert client.closed
    assert client.close_thread is not threading.current_thread()
