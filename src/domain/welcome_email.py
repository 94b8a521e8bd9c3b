"""
Welcome-email pipeline - core business logic.

This module handles one POST /send request end to end:
1. Validate the payload (recipient + validation link)
2. Render the welcome template
3. Hand the message to the mail-delivery capability (single attempt)
4. Return a success or classified error envelope

Validation and delivery failures come back as envelopes. Anything else
propagates to the Lambda boundary, which reports UNHANDLED_ERROR.
"""

import logging
from typing import Any, Dict

from .errors import MailDeliveryError, ValidationError, classify_delivery_error
from .models import EmailRequest, OutboundEmail, SendSummary
from . import responses
from services import templates as template_service

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = 'Bienvenido al Centro Bíblico Alianza Comas'
DEFAULT_PORTAL_URL = 'https://cebac-phi.vercel.app/login'


class WelcomeEmailProcessor:
    """
    Sends the welcome email for a single request.

    The mailer is any object with ``send(OutboundEmail) -> DeliveryReceipt``
    that raises MailDeliveryError on transport failure.
    """

    def __init__(
        self,
        mailer: Any,
        sender: str,
        subject: str = DEFAULT_SUBJECT,
        portal_url: str = DEFAULT_PORTAL_URL
    ):
        self.mailer = mailer
        self.sender = sender
        self.subject = subject
        self.portal_url = portal_url

    def process_request(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate, render and send a welcome email.

        Args:
            payload: Decoded JSON request body

        Returns:
            Dict: Lambda proxy response carrying the envelope
        """
        try:
            request = EmailRequest.from_payload(payload)
        except ValidationError as e:
            logger.warning(f"Rejected request: {e.message} (fields={e.errors})")
            return responses.failure(
                code='VALIDATION_ERROR',
                message=e.message,
                errors=e.errors,
                status=400
            )

        outbound = self._build_email(request)

        try:
            receipt = self.mailer.send(outbound)
        except MailDeliveryError as e:
            mapped = classify_delivery_error(e)
            logger.error(
                f"Welcome email to {request.to} failed: "
                f"{mapped.code} (transport code={e.code})"
            )
            return responses.failure(
                code=mapped.code,
                message=mapped.message,
                details=str(e),
                status=mapped.status
            )

        logger.info(f"Welcome email sent to {request.to}: message_id={receipt.message_id}")

        summary = SendSummary(
            message_id=receipt.message_id,
            to=request.to,
            subject=outbound.subject,
            validation_url=request.validation_url
        )
        return responses.success(
            code='EMAIL_SENT',
            message='email sent successfully',
            data=summary.to_dict(),
            status=200
        )

    def _build_email(self, request: EmailRequest) -> OutboundEmail:
        html = template_service.render_welcome_email(
            validation_url=request.validation_url,
            portal_url=self.portal_url
        )
        return OutboundEmail(
            from_address=self.sender,
            to=request.to,
            subject=self.subject,
            html=html
        )
