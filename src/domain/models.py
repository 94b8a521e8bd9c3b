"""
Data models for the welcome-email domain.

These type-safe data structures define clear contracts between components.
All of them are request-scoped: nothing here outlives a single invocation.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


def _clean(value: Any) -> str:
    """Return a stripped string, or '' for anything that is not a string."""
    if not isinstance(value, str):
        return ''
    return value.strip()


@dataclass(frozen=True)
class EmailRequest:
    """
    Validated welcome-email request.

    Attributes:
        to: Recipient address
        validation_url: Link the recipient follows to validate the account
    """
    to: str
    validation_url: str

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'EmailRequest':
        """
        Build a request from a decoded JSON payload.

        The link is read from ``validationUrl`` first and from the
        lower-cased ``validationurl`` alias second; the first non-empty
        value is canonical.

        Args:
            payload: Decoded request body

        Returns:
            EmailRequest: The validated request

        Raises:
            ValidationError: If ``to`` or the validation link is missing
        """
        # errors.py imports this module at load time
        from .errors import ValidationError

        to = _clean(payload.get('to'))
        validation_url = (
            _clean(payload.get('validationUrl'))
            or _clean(payload.get('validationurl'))
        )

        missing: List[str] = []
        if not to:
            missing.append('to')
        if not validation_url:
            missing.append('validationUrl')

        if missing:
            raise ValidationError(
                f"the '{missing[0]}' field is required",
                errors=missing
            )

        return cls(to=to, validation_url=validation_url)


@dataclass(frozen=True)
class OutboundEmail:
    """
    Message handed to the mail-delivery capability.

    Attributes:
        from_address: Sender identity
        to: Recipient address
        subject: Subject line
        html: Rendered HTML body
    """
    from_address: str
    to: str
    subject: str
    html: str


@dataclass(frozen=True)
class DeliveryReceipt:
    """Result of a successful hand-off to the SMTP server."""
    message_id: str


@dataclass(frozen=True)
class ErrorMapping:
    """
    Domain error reported to the caller for a classified failure.

    Attributes:
        code: Domain error code (e.g. "SMTP_TIMEOUT")
        status: HTTP status code
        message: Caller-facing message
    """
    code: str
    status: int
    message: str

    def __repr__(self) -> str:
        return f"ErrorMapping({self.code}, {self.status})"


@dataclass
class SendSummary:
    """
    Data block of a successful EMAIL_SENT envelope.

    Attributes:
        message_id: Identifier assigned to the delivered message
        to: Recipient address
        subject: Subject line that was sent
        validation_url: Canonical validation link embedded in the body
    """
    message_id: Optional[str]
    to: str
    subject: str
    validation_url: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the camelCase shape returned to callers."""
        return {
            'messageId': self.message_id,
            'to': self.to,
            'subject': self.subject,
            'validationUrl': self.validation_url,
        }
