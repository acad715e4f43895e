import logging
import smtplib
from email.message import EmailMessage

from hackhub.core.config import settings

logger = logging.getLogger(__name__)


def send_email(*, email_to: str, subject: str, body: str, html: str | None = None) -> bool:
    """Send one message over SMTP. Returns False when skipped or failed."""
    if not settings.emails_enabled:
        logger.info("SMTP not configured. Skipping email to %s: %s", email_to, subject)
        logger.debug("Email body: %s", body)
        return False

    message = EmailMessage()
    message["Subject"] = subject
    message["From"] = f"{settings.EMAILS_FROM_NAME} <{settings.EMAILS_FROM_EMAIL}>"
    message["To"] = email_to
    message.set_content(body)
    if html:
        message.add_alternative(html, subtype="html")

    try:
        if settings.SMTP_SSL:
            with smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT) as server:
                if settings.SMTP_USER and settings.SMTP_PASSWORD:
                    server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
                server.send_message(message)
        else:
            with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT) as server:
                if settings.SMTP_TLS:
                    server.starttls()
                if settings.SMTP_USER and settings.SMTP_PASSWORD:
                    server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
                server.send_message(message)
    except (smtplib.SMTPException, OSError) as exc:
        logger.warning("Failed to send email '%s' to %s: %s", subject, email_to, exc)
        return False

    logger.info("Sent email '%s' to %s", subject, email_to)
    return True


def registration_confirmation(*, name: str, event_name: str, start_date: str, location: str) -> tuple[str, str]:
    subject = f"You're registered for {event_name}"
    body = (
        f"Hi {name},\n\n"
        f"You're confirmed for {event_name}.\n"
        f"When: {start_date}\n"
        f"Where: {location}\n\n"
        "Next step: find or create a team from the event hub.\n\n"
        f"See you there,\n{settings.PROJECT_NAME}"
    )
    return subject, body


def feedback_request(*, name: str, event_name: str, form_url: str) -> tuple[str, str]:
    subject = f"Tell us how {event_name} went"
    body = (
        f"Hi {name},\n\n"
        f"Thanks for taking part in {event_name}. We'd love your feedback, "
        "it only takes a few minutes:\n\n"
        f"{form_url}\n\n"
        f"{settings.PROJECT_NAME}"
    )
    return subject, body


def results_published(*, name: str, event_name: str, results_url: str) -> tuple[str, str]:
    subject = f"Results are in for {event_name}"
    body = (
        f"Hi {name},\n\n"
        f"The judges have finished and the results for {event_name} are published:\n\n"
        f"{results_url}\n\n"
        f"{settings.PROJECT_NAME}"
    )
    return subject, body
