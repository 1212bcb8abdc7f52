"""
Outgoing mail (password reset links).

SMTP delivery runs in Starlette's threadpool so the blocking smtplib calls
stay off the event loop. With no SMTP_HOST configured the message is written
to the log instead, which is how development and test environments read
reset links.
"""

import logging
import smtplib
from email.message import EmailMessage

from starlette.concurrency import run_in_threadpool

from devcamper.config import Settings
from devcamper.exceptions import MailDeliveryError
from devcamper.result import Err, Ok, Result

logger = logging.getLogger(__name__)


class Mailer:
    def __init__(self, settings: Settings):
        self.settings = settings

    def _build(self, to: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = f"{self.settings.from_name} <{self.settings.from_email}>"
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=10) as smtp:
            if self.settings.smtp_username:
                smtp.starttls()
                smtp.login(self.settings.smtp_username, self.settings.smtp_password)
            smtp.send_message(message)

    async def send(self, to: str, subject: str, body: str) -> Result[None]:
        message = self._build(to, subject, body)

        if not self.settings.smtp_host:
            logger.info("Mail (not sent, SMTP_HOST unset) to=%s subject=%s\n%s", to, subject, body)
            return Ok(None)

        try:
            await run_in_threadpool(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Mail delivery to %s failed: %s", to, str(e))
            return Err(MailDeliveryError(context={"to": to, "error": str(e)}))

        logger.info("Mail sent to %s: %s", to, subject)
        return Ok(None)
