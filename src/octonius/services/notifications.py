"""Transactional email through the Resend HTTP API."""

from __future__ import annotations

import html
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

import requests
import structlog

from ..config import Settings
from ..errors import ServiceUnavailableError

__all__ = ["EmailMessage", "Mailer", "TEMPLATES", "render_template"]

logger = structlog.get_logger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    html: str
    text: str


def _otp_template(data: Mapping[str, Any]) -> tuple[str, str, str]:
    otp = str(data["otp"])
    minutes = int(data.get("expires_in", 300)) // 60 or 1
    subject = f"Your Octonius login code: {otp}"
    text = (
        f"Your one-time login code is {otp}.\n"
        f"It expires in {minutes} minutes. If you did not request it, ignore this email."
    )
    body = (
        "<p>Your one-time login code is</p>"
        f"<h2 style=\"letter-spacing:4px\">{html.escape(otp)}</h2>"
        f"<p>It expires in {minutes} minutes. If you did not request it, ignore this email.</p>"
    )
    return subject, body, text


def _invitation_template(data: Mapping[str, Any]) -> tuple[str, str, str]:
    workplace = str(data["workplace_name"])
    inviter = str(data.get("inviter_name") or "A teammate")
    link = str(data["invitation_link"])
    note = data.get("message")
    subject = f"{inviter} invited you to join {workplace} on Octonius"
    text = f"{inviter} invited you to join {workplace}.\nAccept the invitation: {link}\n"
    body = (
        f"<p><strong>{html.escape(inviter)}</strong> invited you to join "
        f"<strong>{html.escape(workplace)}</strong> on Octonius.</p>"
    )
    if note:
        text += f"\n{note}\n"
        body += f"<blockquote>{html.escape(str(note))}</blockquote>"
    body += f"<p><a href=\"{html.escape(link, quote=True)}\">Accept invitation</a></p>"
    return subject, body, text


TEMPLATES: dict[str, Callable[[Mapping[str, Any]], tuple[str, str, str]]] = {
    "send_otp_details": _otp_template,
    "workplace_invitation": _invitation_template,
}


def render_template(template: str, to: str, data: Mapping[str, Any]) -> EmailMessage:
    try:
        renderer = TEMPLATES[template]
    except KeyError:
        raise ValueError(f"Unknown email template: {template}") from None
    try:
        subject, body, text = renderer(data)
    except KeyError as exc:
        raise ValueError(f"Missing template field: {exc.args[0]}") from None
    return EmailMessage(to=to, subject=subject, html=body, text=text)


class Mailer:
    """Send templated emails; logs and skips delivery when no API key is set."""

    def __init__(self, settings: Settings, *, timeout: float = 10.0):
        self.settings = settings
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.settings.resend_api_key)

    def send(self, template: str, to: str, data: Mapping[str, Any]) -> dict:
        message = render_template(template, to, data)
        return self.deliver(message, template=template)

    def deliver(self, message: EmailMessage, *, template: Optional[str] = None) -> dict:
        if not self.enabled:
            logger.info("email.skipped", template=template, to=message.to)
            return {"delivered": False, "id": None}

        try:
            response = requests.post(
                RESEND_API_URL,
                headers={"Authorization": f"Bearer {self.settings.resend_api_key}"},
                json={
                    "from": self.settings.resend_from_email,
                    "to": [message.to],
                    "subject": message.subject,
                    "html": message.html,
                    "text": message.text,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.error("email.failed", template=template, to=message.to, error=str(exc))
            raise ServiceUnavailableError("Email delivery failed") from exc

        payload = response.json() if response.content else {}
        logger.info("email.sent", template=template, to=message.to, id=payload.get("id"))
        return {"delivered": True, "id": payload.get("id")}
