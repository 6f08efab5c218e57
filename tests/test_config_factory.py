import pytest

from mailkit.core.config import Settings, get_settings, reset_settings
from mailkit.email.factory import EmailFactoryBuilder, get_email_factory, get_email_sender
from mailkit.email.senders import ConsoleEmailSender, FileSystemEmailSender, SMTPEmailSender
from mailkit.email.types import Address


@pytest.fixture
def clean_env(monkeypatch):
    for key in (
        "EMAIL_PROVIDER",
        "EMAIL_FROM",
        "EMAIL_FROM_NAME",
        "EMAIL_OUTPUT_DIR",
        "SMTP_HOST",
        "SMTP_PORT",
        "SMTP_USERNAME",
        "SMTP_PASSWORD",
        "SMTP_STARTTLS",
    ):
        monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield monkeypatch
    reset_settings()


def test_settings_defaults_and_malformed_values(clean_env) -> None:
    clean_env.setenv("SMTP_PORT", "not-a-number")
    clean_env.setenv("SMTP_STARTTLS", "maybe")

    settings = Settings()

    assert settings.EMAIL_PROVIDER == "console"
    assert settings.SMTP_PORT == 25
    assert settings.SMTP_STARTTLS is None
    assert settings.SMTP_PASSWORD.get_secret_value() == ""


def test_settings_read_environment(clean_env) -> None:
    clean_env.setenv("SMTP_PORT", " 2525 ")
    clean_env.setenv("SMTP_STARTTLS", "off")
    clean_env.setenv("SMTP_PASSWORD", "s3cret")

    settings = Settings()

    assert settings.SMTP_PORT == 2525
    assert settings.SMTP_STARTTLS is False
    assert "s3cret" not in repr(settings.SMTP_PASSWORD)


def test_get_settings_is_singleton_until_reset(clean_env) -> None:
    first = get_settings()
    assert get_settings() is first
    reset_settings()
    assert get_settings() is not first


@pytest.mark.parametrize(
    ("provider", "expected"),
    [
        ("console", ConsoleEmailSender),
        (" FileSystem ", FileSystemEmailSender),
        ("smtp", SMTPEmailSender),
        ("sendgrid", ConsoleEmailSender),
    ],
)
def test_get_email_sender_by_provider(clean_env, tmp_path, provider, expected) -> None:
    clean_env.setenv("EMAIL_PROVIDER", provider)
    clean_env.setenv("EMAIL_OUTPUT_DIR", str(tmp_path / "out"))

    assert isinstance(get_email_sender(Settings()), expected)


def test_get_email_factory_uses_configured_from(clean_env, tmp_path) -> None:
    clean_env.setenv("EMAIL_FROM", "robot@example.com")
    clean_env.setenv("EMAIL_FROM_NAME", "Robot")

    builder = get_email_factory(Settings()).create()

    assert builder.message.from_ == Address.of("robot@example.com", "Robot")


def test_factory_builder_options(tmp_path) -> None:
    options = EmailFactoryBuilder("noreply@example.com")

    assert isinstance(options.use_console().sender, ConsoleEmailSender)
    filesystem = options.use_filesystem(tmp_path / "captured")
    assert isinstance(filesystem.sender, FileSystemEmailSender)
    assert (tmp_path / "captured").is_dir()
    assert isinstance(options.use_smtp("smtp.example.com", 25).sender, SMTPEmailSender)
    assert isinstance(options.use_smtp("smtp.example.com", 587, "user", "pass").sender, SMTPEmailSender)
    assert isinstance(options.use_smtp("smtp.example.com", 465, certificate="client.pem").sender, SMTPEmailSender)
    with pytest.raises(ValueError):
        options.use_smtp("smtp.example.com", 587, username="user")


def test_factory_creates_independent_builders(tmp_path) -> None:
    factory = EmailFactoryBuilder("noreply@example.com", "No Reply").use_filesystem(tmp_path)

    first = factory.create().to("a@example.com")
    second = factory.create()

    assert second.message.to == []
    assert first.message.from_ == second.message.from_ == Address.of("noreply@example.com", "No Reply")
    assert first.send().succeeded
    assert len(list(tmp_path.iterdir())) == 1
