from typing import Any, Dict
from jinja2 import Environment, FileSystemLoader
from pathlib import Path
import smtplib
import time
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from app.core.config import settings
import logging

logger = logging.getLogger(__name__)

class EmailService:
    def __init__(self):
        self.template_dir = Path(__file__).resolve().parent.parent / "email-templates" / "src"
        self.env = Environment(loader=FileSystemLoader(str(self.template_dir)), autoescape=True)

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        template = self.env.get_template(template_name)
        return template.render(**context)

    def build_message(self, *, email_to: str, subject: str, html_content: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{settings.EMAILS_FROM_NAME} <{settings.EMAILS_FROM_EMAIL}>"
        msg["To"] = email_to
        msg.attach(MIMEText(html_content, "html"))
        return msg

    def send_email(
        self,
        *,
        email_to: str,
        subject: str,
        template_name: str,
        context: Dict[str, Any] | None = None,
    ) -> None:
        assert settings.emails_enabled, "SMTP_HOST and EMAILS_FROM_EMAIL must be configured"

        html_content = self.render_template(template_name, context or {})
        msg = self.build_message(email_to=email_to, subject=subject, html_content=html_content)

        # Retry logic for connection
        max_retries = 3
        for attempt in range(max_retries):
            try:
                logger.info(f"Connecting to SMTP server: {settings.SMTP_HOST}:{settings.SMTP_PORT} (Attempt {attempt+1}/{max_retries})")
                with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=60) as server:
                    server.ehlo()
                    if settings.SMTP_TLS:
                        server.starttls()
                        server.ehlo()
                    if settings.SMTP_USER and settings.SMTP_PASSWORD:
                        server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)

                    refused = server.sendmail(settings.EMAILS_FROM_EMAIL, [email_to], msg.as_string())
                    if refused:
                        raise smtplib.SMTPRecipientsRefused(refused)

                    logger.info(f"Email sent to {email_to} with template: {template_name}")
                    return

            except (smtplib.SMTPServerDisconnected, smtplib.SMTPConnectError) as e:
                logger.warning(f"SMTP connection error on attempt {attempt+1}: {e}")
                if attempt == max_retries - 1:
                    logger.error(f"Failed to send email to {email_to} after {max_retries} attempts")
                    raise
                time.sleep(2)


email_service = EmailService()
