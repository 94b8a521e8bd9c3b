"""
AWS Lambda handler for POST /send (API Gateway proxy integration).

Thin orchestration layer that delegates to WelcomeEmailProcessor.
Policy: one delivery attempt per request, every outcome returned as a
JSON envelope. This module is the last catch-all: nothing escapes it.
"""

import base64
import binascii
import json
import logging
import os
from typing import Any, Dict

from domain import responses
from domain.errors import ConfigurationError, ValidationError
from domain.welcome_email import DEFAULT_PORTAL_URL, DEFAULT_SUBJECT, WelcomeEmailProcessor
from integrations.smtp_delivery import SmtpMailer

# Configure logging
logger = logging.getLogger()
logger.setLevel(os.environ.get('LOG_LEVEL', 'INFO').upper())

# Add console handler for local testing (AWS Lambda provides handlers automatically)
if not logger.handlers:
    console_handler = logging.StreamHandler()
    formatter = logging.Formatter('%(levelname)s - %(message)s')
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

ENVIRONMENT = os.environ.get('ENVIRONMENT', 'dev')
MAIL_FROM_CONFIGURED = bool(os.environ.get('MAIL_FROM'))

# Initialize mailer and processor once at module level (reused across invocations)
try:
    mailer = SmtpMailer.from_environment()
except ConfigurationError as e:
    logger.error(f"Module initialization failed: {e}")
    raise

email_processor = WelcomeEmailProcessor(
    mailer=mailer,
    sender=mailer.default_sender,
    subject=os.environ.get('WELCOME_SUBJECT', DEFAULT_SUBJECT),
    portal_url=os.environ.get('PORTAL_URL', DEFAULT_PORTAL_URL)
)


def _decode_payload(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Extract the JSON request body from a Lambda event.

    API Gateway events carry the body as a (possibly base64 encoded)
    string; a direct invocation passes the payload as the event itself.

    Raises:
        ValidationError: If the body is not a JSON object
    """
    if 'body' not in event and 'requestContext' not in event:
        payload = event
    else:
        body = event.get('body')
        if body is None or body == '':
            return {}

        # Console test events often carry an already-decoded body
        if isinstance(body, dict):
            return body

        try:
            if event.get('isBase64Encoded'):
                body = base64.b64decode(body).decode('utf-8')
            payload = json.loads(body)
        except (binascii.Error, UnicodeDecodeError, TypeError, json.JSONDecodeError) as e:
            raise ValidationError(
                'request body must be a JSON object', errors=['body']
            ) from e

    if not isinstance(payload, dict):
        raise ValidationError('request body must be a JSON object', errors=['body'])

    return payload


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Send a welcome email with a validation link.

    Expected body:
    {
        "to": "recipient@example.com",
        "validationUrl": "https://example.com/validate/abc123"
    }
    ("validationurl" is accepted as an alias.)

    Args:
        event: API Gateway proxy event (or the payload for direct invocation)
        context: Lambda context

    Returns:
        Dict: Proxy response with statusCode, headers and a JSON envelope body
    """
    request_id = getattr(context, 'aws_request_id', None) or getattr(context, 'request_id', 'UNKNOWN')
    logger.info(f"Environment: {ENVIRONMENT}, request: {request_id}")

    try:
        payload = _decode_payload(event)
        return email_processor.process_request(payload)

    except ValidationError as ve:
        logger.warning(f"Validation error: {ve.message}")
        return responses.failure(
            code='VALIDATION_ERROR',
            message=ve.message,
            errors=ve.errors,
            status=400
        )

    except Exception as e:
        logger.error(f"Unhandled error for request {request_id}: {str(e)}", exc_info=True)
        return responses.failure(
            code='UNHANDLED_ERROR',
            message='unhandled error',
            details=str(e) or e.__class__.__name__,
            status=500
        )


def health_check(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Simple health check endpoint for monitoring.
    """
    return responses.success(
        code='HEALTHY',
        message='OK',
        data={
            'status': 'healthy',
            'environment': ENVIRONMENT,
            'smtpHost': mailer.host,
            'mailFromConfigured': MAIL_FROM_CONFIGURED
        }
    )
