"""
Contact API endpoint.

Relays a contact-form submission to the team inbox through the mail
provider. The client only ever sees a generic failure message; the
underlying cause is logged.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from api.models import ContactResponse, ContactSubmission
from utils.config import AppConfig
from utils.mailer import ContactMessage, MailNotConfiguredError, MailTransportError, ResendMailer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contact", tags=["contact"])

_mailer: ResendMailer | None = None

SEND_FAILED_MESSAGE = "Your message could not be sent right now. Please try again later."
NOT_CONFIGURED_MESSAGE = "The contact form is temporarily unavailable."


def get_mailer() -> ResendMailer:
    """Return the process-wide mailer, built from the environment on first use."""
    global _mailer
    if _mailer is None:
        cfg = AppConfig.from_env()
        _mailer = ResendMailer(cfg.resend_api_key, cfg.resend_from, cfg.contact_to)
    return _mailer


def set_mailer(mailer: ResendMailer | None) -> None:
    global _mailer
    _mailer = mailer


def relay(submission: ContactSubmission) -> None:
    """Send *submission*; maps transport failures to HTTP errors.

    Raises:
        HTTPException: 503 when mail is not configured, 502 when the
            provider fails.
    """
    mailer = get_mailer()
    msg = ContactMessage(
        name=submission.name,
        email=submission.email,
        subject=submission.subject,
        message=submission.message,
    )
    try:
        mailer.relay_contact(msg)
    except MailNotConfiguredError as exc:
        logger.error("Contact submission rejected: %s", exc)
        raise HTTPException(status_code=503, detail=NOT_CONFIGURED_MESSAGE) from exc
    except MailTransportError as exc:
        logger.error("Contact relay failed: %s", exc)
        raise HTTPException(status_code=502, detail=SEND_FAILED_MESSAGE) from exc


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ContactResponse,
    responses={
        201: {"description": "Message relayed"},
        422: {"description": "Validation error: a field is missing or invalid"},
        502: {"description": "Mail provider failed"},
        503: {"description": "Mail relay not configured"},
    },
    summary="Send a contact message",
)
def submit_contact(submission: ContactSubmission) -> ContactResponse:
    relay(submission)
    return ContactResponse(status="sent")
