"""Inbound webhooks: PayFast ITN and Twilio WhatsApp messages."""

import logging

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import PlainTextResponse, Response
from sqlalchemy.orm import Session

from atsboost.api.routes.payments import process_itn
from atsboost.config import settings
from atsboost.db import SAProfile, User, get_db
from atsboost.services import cv_service
from atsboost.services.plan_features import get_scans_remaining, record_scan
from atsboost.tools import whatsapp
from atsboost.tools.errors import DocumentParseError, MediaRejected, MediaTooLarge, UnsupportedFileType

logger = logging.getLogger(__name__)

router = APIRouter()

EMPTY_TWIML = '<?xml version="1.0" encoding="UTF-8"?><Response></Response>'

HELP_MESSAGE = (
    "ATSBoost: Send your CV as a PDF or Word (DOCX) document and we'll reply with your ATS score. "
    f"For the full report visit {settings.app_url}"
)

SCANS_USED_MESSAGE = (
    "ATSBoost: You have used all CV scans for this period. "
    f"Upgrade your plan for more scans: {settings.app_url}/pricing"
)


@router.post("/payfast", response_class=PlainTextResponse)
async def payfast_webhook(request: Request, db: Session = Depends(get_db)):
    """PayFast ITN callback (same handling as /payments/notify)."""
    return await process_itn(request, db)


def _user_for_number(db: Session, number: str) -> User | None:
    profile = (
        db.query(SAProfile)
        .filter(SAProfile.whatsapp_number == number, SAProfile.whatsapp_verified.is_(True))
        .first()
    )
    return profile.user if profile else None


def _twiml() -> Response:
    return Response(content=EMPTY_TWIML, media_type="application/xml")


@router.post("/whatsapp")
async def whatsapp_webhook(request: Request, db: Session = Depends(get_db)):
    """
    Inbound WhatsApp message from Twilio.

    A PDF or DOCX attachment is stored as a CV (owned by the user whose
    verified number sent it, a guest CV otherwise), scored, and the score is
    sent back. Anything else gets the help message. With Twilio configured,
    requests without a valid X-Twilio-Signature are rejected.
    """
    form = await request.form()
    fields = {key: str(value) for key, value in form.items()}

    if settings.twilio_auth_token:
        webhook_url = f"{settings.api_url}{request.url.path}"
        if not whatsapp.validate_request_signature(webhook_url, fields, request.headers.get("X-Twilio-Signature")):
            logger.warning(f"Rejected WhatsApp webhook with invalid signature from {fields.get('From')}")
            raise HTTPException(status_code=403, detail="Invalid Twilio signature")

    sender = fields.get("From", "").removeprefix("whatsapp:")
    num_media = int(fields.get("NumMedia") or 0)
    logger.info(f"Inbound WhatsApp message from {sender} with {num_media} attachment(s)")

    if not whatsapp.is_valid_sa_number(sender):
        logger.warning(f"Ignoring WhatsApp message from non-SA number {sender}")
        return _twiml()

    number = whatsapp.normalize_sa_number(sender)
    if num_media < 1:
        whatsapp.send_message(number, HELP_MESSAGE)
        return _twiml()

    user = _user_for_number(db, number)
    user_id = user.id if user else None
    remaining = get_scans_remaining(db, user_id)
    if remaining is not None and remaining <= 0:
        whatsapp.send_message(number, SCANS_USED_MESSAGE)
        return _twiml()

    media_url = fields.get("MediaUrl0", "")
    content_type = fields.get("MediaContentType0", "")
    try:
        content = whatsapp.download_media(media_url, settings.max_upload_size)
    except MediaTooLarge:
        limit_mb = settings.max_upload_size // (1024 * 1024)
        whatsapp.send_message(number, f"ATSBoost: Your document is too large. The limit is {limit_mb}MB.")
        return _twiml()
    except (MediaRejected, httpx.HTTPError) as e:
        logger.error(f"Failed to download WhatsApp media {media_url}: {e}")
        whatsapp.send_message(number, "ATSBoost: We couldn't download your document. Please try again.")
        return _twiml()

    filename = fields.get("Body", "").strip() or "whatsapp-cv"
    try:
        cv = cv_service.create_cv(db, user, filename, content_type, content, upload_method="whatsapp")
    except UnsupportedFileType:
        whatsapp.send_message(number, HELP_MESSAGE)
        return _twiml()
    except DocumentParseError as e:
        logger.warning(f"Unreadable WhatsApp CV from {number}: {e}")
        whatsapp.send_message(number, "ATSBoost: We couldn't read your document. Please send a text-based PDF or DOCX.")
        return _twiml()

    score = cv_service.score_cv(db, cv)
    record_scan(db, user_id)
    whatsapp.send_cv_analysis_notification(number, score.score, cv.file_name)
    return _twiml()
