# athletehub/utils/email.py
import logging
import smtplib
from email.message import EmailMessage

from athletehub import settings

logger = logging.getLogger(__name__)


def send_email(to: str, subject: str, body: str) -> None:
    """
    Send through SMTP when SMTP_HOST is set; otherwise log the message so
    links can be copied out of the dev console.
    """
    if not settings.SMTP_HOST:
        logger.info("[email] to=%s subject=%r\n%s", to, subject, body)
        return

    msg = EmailMessage()
    msg["From"] = settings.EMAIL_FROM
    msg["To"] = to
    msg["Subject"] = subject
    msg.set_content(body)

    # 465 is implicit TLS, anything else upgrades with STARTTLS
    if settings.SMTP_PORT == 465:
        transport = smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10)
    else:
        transport = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10)

    with transport as smtp:
        if settings.SMTP_PORT != 465:
            smtp.starttls()
        if settings.SMTP_USER:
            smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
        smtp.send_message(msg)


def send_verification_email(to: str, token: str) -> None:
    link = f"{settings.FRONTEND_URL}/verify-email/{token}"
    send_email(to, "Verify your email", f"Confirm your account: {link}\n\nThe link expires in 24 hours.")


def send_password_reset_email(to: str, token: str) -> None:
    link = f"{settings.FRONTEND_URL}/reset-password/{token}"
    send_email(to, "Password reset", f"Reset your password: {link}\n\nThe link expires in 1 hour.")
