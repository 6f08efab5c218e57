"""
Smoke-проверка отправки: одно письмо через канал из настроек (EMAIL_PROVIDER).
Запуск: python -m mailkit.smoke
"""
import sys

SAMPLE_TEMPLATE = "<p>Hello, {{name}}!</p><p>Provider: {{provider}}</p>"


def check_send_smoke() -> None:
    """
    Собирает письмо с plain- и HTML-телом (HTML рендерится из шаблона в памяти)
    и отправляет его получателю EMAIL_FROM. При ошибках доставки завершается с кодом 1.
    """
    from mailkit.core.config import get_settings
    from mailkit.core.logging_config import get_logger, setup_logging
    from mailkit.email import get_email_factory, render

    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FILE or None)
    logger = get_logger("mailkit.smoke")

    factory = get_email_factory(settings)
    html = render(SAMPLE_TEMPLATE, {"name": settings.EMAIL_FROM, "provider": settings.EMAIL_PROVIDER})
    result = (
        factory.create()
        .to(settings.EMAIL_FROM)
        .subject("mailkit smoke test")
        .plain_body("This is a mailkit smoke test message.")
        .html_body(html)
        .send()
    )
    if not result.succeeded:
        for error in result.errors:
            logger.error("FAIL: %s", error)
        sys.exit(1)
    logger.info("OK: smoke message delivered via %s", settings.EMAIL_PROVIDER)


if __name__ == "__main__":
    check_send_smoke()
