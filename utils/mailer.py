"""Contact-form mail relay via the Resend HTTP API.

``ResendMailer.relay_contact()`` sends the submission to the team inbox
(reply-to set to the submitter) and then a best-effort confirmation to
the submitter. Only the first send decides success; a failed confirmation
is logged and otherwise ignored.

All user-supplied text is HTML-escaped before it is placed in a message
body.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass

import requests

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
DEFAULT_FROM = "TFactorTx <info@tfactortx.com>"
DEFAULT_TO = "info@tfactortx.com"


class MailTransportError(Exception):
    """The mail provider rejected the message or could not be reached."""


class MailNotConfiguredError(MailTransportError):
    """No API key is configured for the mail provider."""


@dataclass(frozen=True)
class ContactMessage:
    name: str
    email: str
    subject: str
    message: str


def _team_email(msg: ContactMessage) -> tuple[str, str, str]:
    subject = f"TFactorTx Contact: {msg.subject}"
    body_html = (
        '<div style="font-family: Arial, sans-serif; line-height: 1.5; color: #111827;">'
        '<h2 style="margin: 0 0 8px 0;">New contact form submission</h2>'
        f"<p>From: <strong>{html.escape(msg.name)}</strong> "
        f"&lt;{html.escape(msg.email)}&gt;</p>"
        f"<p>Subject: {html.escape(msg.subject)}</p>"
        '<div style="padding: 12px; border: 1px solid #e5e7eb; border-radius: 8px; '
        f'background: #f9fafb; white-space: pre-wrap;">{html.escape(msg.message)}</div>'
        "</div>"
    )
    body_text = (
        f"New contact form submission\nFrom: {msg.name} <{msg.email}>\n"
        f"Subject: {msg.subject}\n\n{msg.message}"
    )
    return subject, body_html, body_text


def _confirmation_email(msg: ContactMessage) -> tuple[str, str, str]:
    subject = "Thanks for contacting TFactorTx, we received your message"
    body_html = (
        '<div style="font-family: Arial, sans-serif; line-height: 1.6; color: #111827;">'
        f"<p>Hi {html.escape(msg.name)},</p>"
        "<p>Thanks for reaching out to <strong>TFactorTx</strong>. "
        "We will get back to you as soon as possible.</p>"
        '<div style="padding: 12px; border: 1px solid #e5e7eb; border-radius: 8px; '
        f'background: #f9fafb; white-space: pre-wrap;">{html.escape(msg.message)}</div>'
        "<p>If you want to add anything, just reply to this email.</p>"
        "<p>TFactorTx Team</p>"
        "</div>"
    )
    body_text = (
        f"Hi {msg.name},\n\nThanks for contacting TFactorTx. We will get back to you "
        f"as soon as possible.\n\nYour message:\n{msg.message}\n\nTFactorTx Team"
    )
    return subject, body_html, body_text


class ResendMailer:
    """Thin client for the Resend ``/emails`` endpoint."""

    def __init__(self, api_key: str | None, from_address: str = DEFAULT_FROM,
                 to_address: str = DEFAULT_TO, session: requests.Session | None = None,
                 timeout: float = 15):
        self.api_key = api_key
        self.from_address = from_address
        self.to_address = to_address
        self.timeout = timeout
        self._session = session

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            from utils.http import build_session
            self._session = build_session()
        return self._session

    def send(self, to: str, subject: str, body_html: str, body_text: str,
             reply_to: str | None = None) -> str | None:
        """Send one message; returns the provider's message id.

        Raises:
            MailNotConfiguredError: If no API key is set.
            MailTransportError: On transport failure or a non-2xx response.
        """
        if not self.configured:
            raise MailNotConfiguredError("RESEND_API_KEY is not set")
        payload = {
            "from": self.from_address,
            "to": [to],
            "subject": subject,
            "html": body_html,
            "text": body_text,
        }
        if reply_to:
            payload["reply_to"] = reply_to
        try:
            resp = self.session.post(
                RESEND_API_URL,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise MailTransportError(f"Mail provider unreachable: {exc}") from exc
        if not resp.ok:
            raise MailTransportError(
                f"Mail provider returned {resp.status_code}: {resp.text[:200]}"
            )
        try:
            return resp.json().get("id")
        except ValueError:
            return None

    def relay_contact(self, msg: ContactMessage) -> str | None:
        """Relay *msg* to the team inbox, then confirm to the submitter.

        Raises:
            MailTransportError: If the team message could not be sent.
        """
        subject, body_html, body_text = _team_email(msg)
        message_id = self.send(self.to_address, subject, body_html, body_text,
                               reply_to=msg.email)
        logger.info("Relayed contact message id=%s", message_id)

        subject, body_html, body_text = _confirmation_email(msg)
        try:
            self.send(msg.email, subject, body_html, body_text, reply_to=self.to_address)
        except MailTransportError:
            logger.warning("Contact confirmation email failed", exc_info=True)
        return message_id
