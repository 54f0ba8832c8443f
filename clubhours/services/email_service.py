# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Password-reset e-mail delivery over SMTP, or a logging mock when unconfigured."""
import asyncio
import smtplib
from email.message import EmailMessage
from urllib.parse import urlencode

from clubhours.core.config import settings
from clubhours.core.logging import get_logger

logger = get_logger(__name__)

SENDER_NAME = "TSV BÜ Tennis App"
RESET_SUBJECT = f"Passwort zurücksetzen - {SENDER_NAME}"

_RESET_TEXT = """Passwort zurücksetzen

Sie haben eine Passwort-Zurücksetzung für Ihr {app} Konto angefordert.

Klicken Sie auf diesen Link, um Ihr Passwort zurückzusetzen: {url}

Dieser Link läuft in 24 Stunden ab.

Falls Sie diese Anfrage nicht gestellt haben, ignorieren Sie diese E-Mail bitte.
"""

_RESET_HTML = """<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #333;">Passwort zurücksetzen</h2>
  <p>Sie haben eine Passwort-Zurücksetzung für Ihr {app} Konto angefordert.</p>
  <p><a href="{url}">Passwort zurücksetzen</a></p>
  <p style="word-break: break-all; color: #666;">{url}</p>
  <p style="color: #666; font-size: 14px;">Dieser Link läuft in 24 Stunden ab.</p>
  <p style="color: #666; font-size: 14px;">Falls Sie diese Anfrage nicht gestellt haben, ignorieren Sie diese E-Mail bitte.</p>
</div>
"""


def reset_url(token: str, user_id: str) -> str:
    return f"{settings.FRONTEND_URL}/resetPassword?{urlencode({'token': token, 'id': user_id})}"


class EmailService:
    @property
    def is_mock(self) -> bool:
        return not settings.EMAIL_USER

    def _send_smtp(self, message: EmailMessage) -> None:
        with smtplib.SMTP(settings.EMAIL_HOST, settings.EMAIL_PORT, timeout=10) as smtp:
            smtp.starttls()
            smtp.login(settings.EMAIL_USER, settings.EMAIL_PASSWORD)
            smtp.send_message(message)

    async def send_email(self, to: str, subject: str, text_body: str, html_body: str) -> None:
        """Raises ``smtplib.SMTPException`` or ``OSError`` when delivery fails."""
        if self.is_mock:
            logger.info("[MOCK EMAIL] To: %s | Subject: %s | Body: %s", to, subject, text_body)
            return
        message = EmailMessage()
        message["From"] = f"{SENDER_NAME} <{settings.EMAIL_FROM or settings.EMAIL_USER}>"
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text_body)
        message.add_alternative(html_body, subtype="html")
        await asyncio.to_thread(self._send_smtp, message)
        logger.info("Email sent to %s", to)

    async def send_password_reset_email(self, to: str, token: str, user_id: str) -> None:
        url = reset_url(token, user_id)
        await self.send_email(
            to,
            RESET_SUBJECT,
            _RESET_TEXT.format(app=SENDER_NAME, url=url),
            _RESET_HTML.format(app=SENDER_NAME, url=url),
        )
