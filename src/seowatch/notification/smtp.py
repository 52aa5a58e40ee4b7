"""Email alert channel over SMTP."""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import aiosmtplib

from ..config.settings import AlertConfig, SmtpSettings
from ..utils.logging import get_structured_logger
from .formatting import AlertMessageFormatter
from .types import AlertLike, DeliveryResult, DeliveryStatus, NotificationError

logger = get_structured_logger(__name__)


class EmailSender:
    """Sends multipart messages through an SMTP server."""

    def __init__(self, settings: SmtpSettings):
        self.settings = settings

    async def send(
        self, recipients: list[str], subject: str, text_body: str, html_body: str
    ) -> None:
        message = MIMEMultipart("alternative")
        message["From"] = f"{self.settings.from_name} <{self.settings.from_address}>"
        message["To"] = ", ".join(recipients)
        message["Subject"] = subject
        message.attach(MIMEText(text_body, "plain"))
        message.attach(MIMEText(html_body, "html"))

        password = self.settings.password.get_secret_value() or None

        try:
            await aiosmtplib.send(
                message,
                recipients=recipients,
                hostname=self.settings.host,
                port=self.settings.port,
                username=self.settings.username,
                password=password,
                start_tls=self.settings.use_tls,
            )
        except Exception as e:
            raise NotificationError(f"SMTP delivery failed: {str(e)}") from e


class EmailChannel:
    """Delivers alerts by email to the configured recipients."""

    name = "email"

    def __init__(
        self, sender: EmailSender, formatter: Optional[AlertMessageFormatter] = None
    ):
        self.sender = sender
        self.formatter = formatter or AlertMessageFormatter()

    async def deliver(self, alert: AlertLike, config: AlertConfig) -> DeliveryResult:
        if not config.email_notifications:
            return DeliveryResult(self.name, DeliveryStatus.SKIPPED, "disabled")
        if not config.email_recipients:
            return DeliveryResult(self.name, DeliveryStatus.SKIPPED, "no recipients")

        recipients = list(config.email_recipients)

        try:
            await self.sender.send(
                recipients,
                self.formatter.format_email_subject(alert),
                self.formatter.format_email_text(alert),
                self.formatter.format_email_html(alert),
            )
        except Exception as e:
            logger.error(
                f"Failed to send email alert: {str(e)}",
                alert_id=alert.id,
                recipients=len(recipients),
            )
            return DeliveryResult(self.name, DeliveryStatus.FAILED, str(e))

        logger.info("Email alert sent", alert_id=alert.id, recipients=len(recipients))
        return DeliveryResult(self.name, DeliveryStatus.DELIVERED)
