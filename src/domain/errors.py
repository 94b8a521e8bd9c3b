"""
Error taxonomy for the welcome-email service.

Three kinds of failure reach the caller:
- ValidationError: the request is unusable (400)
- MailDeliveryError: the SMTP transport failed (classified below)
- anything else: reported as UNHANDLED_ERROR by the Lambda boundary

ConfigurationError never reaches a caller; it aborts the cold start.
"""

from typing import Any, List, Optional

from .models import ErrorMapping


# Transport classification codes carried by MailDeliveryError
AUTH_FAILED = 'EAUTH'
HOST_NOT_FOUND = 'ENOTFOUND'
TIMED_OUT = 'ETIMEDOUT'
ENVELOPE_REJECTED = 'EENVELOPE'
CONNECTION_FAILED = 'ECONNECTION'
MESSAGE_FAILED = 'EMESSAGE'


class ConfigurationError(Exception):
    """Raised when required configuration is invalid or missing."""
    pass


class ValidationError(Exception):
    """
    Raised when a request payload fails validation.

    Attributes:
        message: Caller-facing description of the first problem found
        errors: Names of every offending field
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class MailDeliveryError(Exception):
    """
    Raised when the mail-delivery capability fails to hand off a message.

    Attributes:
        code: Transport classification (e.g. EAUTH, ENOTFOUND, ETIMEDOUT),
              or None when the failure could not be classified
    """

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


_DELIVERY_ERROR_MAP = {
    AUTH_FAILED: ErrorMapping(
        code='SMTP_AUTH_FAILED',
        status=401,
        message='SMTP authentication failed'
    ),
    HOST_NOT_FOUND: ErrorMapping(
        code='SMTP_HOST_NOT_FOUND',
        status=502,
        message='SMTP server not found'
    ),
    TIMED_OUT: ErrorMapping(
        code='SMTP_TIMEOUT',
        status=504,
        message='timed out communicating with SMTP server'
    ),
}

DEFAULT_DELIVERY_ERROR = ErrorMapping(
    code='EMAIL_SEND_FAILED',
    status=500,
    message='could not send the email'
)


def classify_delivery_error(error: Any) -> ErrorMapping:
    """
    Map a transport failure to the domain error reported to the caller.

    Total over its input: anything without a recognised ``code`` attribute
    (including None) falls through to EMAIL_SEND_FAILED.

    Args:
        error: Usually a MailDeliveryError, but any object is accepted

    Returns:
        ErrorMapping with the domain code, HTTP status and message
    """
    code = getattr(error, 'code', None)
    if not isinstance(code, str):
        return DEFAULT_DELIVERY_ERROR
    return _DELIVERY_ERROR_MAP.get(code, DEFAULT_DELIVERY_ERROR)
