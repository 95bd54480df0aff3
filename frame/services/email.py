"""
Outgoing email.

Messages are rendered from the Jinja2 templates in frame/templates/email and
handed to the configured backend: "console" writes them to the log, "smtp"
delivers them through the configured server. send() reports failure by
returning False so callers can undo work that depended on the message.
"""
import logging
import smtplib
from email.message import EmailMessage
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from frame.core.config import settings

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"

templates = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
)


class EmailService:
    def __init__(self, backend: Optional[str] = None, sender: Optional[str] = None):
        self.backend = backend or settings.EMAIL_BACKEND
        self.sender = sender or settings.EMAIL_FROM

    def render(self, template_name: str, **context) -> str:
        return templates.get_template(template_name).render(app_name="Frame", **context)

    def send(self, to: str, subject: str, html: str) -> bool:
        if self.backend == "console":
            logger.info("Email to %s: %s\n%s", to, subject, html)
            return True

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML capable mail client.")
        message.add_alternative(html, subtype="html")

        try:
            with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as smtp:
                smtp.starttls()
                if settings.SMTP_USER:
                    smtp.login(settings.SMTP_USER, settings.SMTP_PASSWORD or "")
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send email to %s", to)
            return False

        logger.info("Email sent to %s: %s", to, subject)
        return True

    def send_magic_link(self, email: str, sign_in_url: str) -> bool:
        html = self.render(
            "magic_link.html",
            sign_in_url=sign_in_url,
            expires_minutes=settings.MAGIC_LINK_EXPIRE_MINUTES,
        )
        return self.send(email, "Sign in to Frame", html)

    def send_invitation(
        self, email: str, organization_name: str, inviter_name: str, invite_url: str, role: str
    ) -> bool:
        html = self.render(
            "invitation.html",
            organization_name=organization_name,
            inviter_name=inviter_name,
            invite_url=invite_url,
            role=role,
            expires_days=settings.INVITATION_EXPIRE_DAYS,
        )
        return self.send(email, f"You're invited to join {organization_name} on Frame", html)

    def send_welcome(self, email: str, user_name: str, organization_name: str) -> bool:
        html = self.render(
            "welcome.html",
            user_name=user_name,
            organization_name=organization_name,
            app_url=settings.APP_URL,
        )
        return self.send(email, "Welcome to Frame!", html)


def get_email_service() -> EmailService:
    return EmailService()
