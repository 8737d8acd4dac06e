"""
Login code delivery over SMTP

Sending is blocking; callers run `send_login_code` in the threadpool.
"""

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from learnhub.config import (
    EMAIL_FROM, EMAIL_HOST, EMAIL_PASS, EMAIL_PORT, EMAIL_TIMEOUT_SECONDS,
    EMAIL_USE_TLS, EMAIL_USER, OTP_TTL_MINUTES
)

logger = logging.getLogger(__name__)


class CodeMailer:

    def __init__(
        self,
        host: str = EMAIL_HOST,
        port: int = EMAIL_PORT,
        user: Optional[str] = EMAIL_USER,
        password: Optional[str] = EMAIL_PASS,
        sender: Optional[str] = EMAIL_FROM,
        use_tls: bool = EMAIL_USE_TLS,
        timeout: int = EMAIL_TIMEOUT_SECONDS
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender or user
        self.use_tls = use_tls
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.host and self.user and self.password)

    def build_message(self, to_email: str, code: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = "Your LearnHub access code"
        message["From"] = f"LearnHub Security <{self.sender}>"
        message["To"] = to_email
        message.set_content(
            f"Your verification code is: {code}\n\n"
            f"It expires in {OTP_TTL_MINUTES} minutes."
        )
        message.add_alternative(
            '<div style="font-family:sans-serif;padding:20px;">'
            '<h2>LearnHub</h2>'
            f'<p>Your verification code is: <b>{code}</b></p>'
            '</div>',
            subtype="html"
        )
        return message

    def send_login_code(self, to_email: str, code: str) -> bool:
        """True when the SMTP server accepted the message"""
        if not self.enabled:
            return False

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                smtp.login(self.user, self.password)
                smtp.send_message(self.build_message(to_email, code))
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Login code email to %s failed: %s", to_email, e)
            return False

        logger.info("Login code emailed to %s", to_email)
        return True
