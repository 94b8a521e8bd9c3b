"""
SMTP Mail Delivery Module

This module provides the mail-delivery capability used by Lambda handlers:
one SmtpMailer per container, one SMTP connection per message, no retries.

Usage:
    from integrations.smtp_delivery import SmtpMailer

    mailer = SmtpMailer.from_environment()
    receipt = mailer.send(outbound_email)
    print(receipt.message_id)

Transport failures are raised as MailDeliveryError with a classification
code (EAUTH, ENOTFOUND, ETIMEDOUT, EENVELOPE, ECONNECTION, EMESSAGE).
"""

import logging
import os
import smtplib
import socket
import ssl
import time
from email.message import EmailMessage
from email.utils import make_msgid
from typing import Optional

from domain.errors import (
    AUTH_FAILED,
    CONNECTION_FAILED,
    ENVELOPE_REJECTED,
    HOST_NOT_FOUND,
    MESSAGE_FAILED,
    TIMED_OUT,
    ConfigurationError,
    MailDeliveryError,
)
from domain.models import DeliveryReceipt, OutboundEmail
from services import secrets as secrets_service

logger = logging.getLogger(__name__)

DEFAULT_SMTP_HOST = 'smtp.gmail.com'
DEFAULT_SMTP_PORT = 465
DEFAULT_TIMEOUT_SECONDS = 30
IMPLICIT_TLS_PORT = 465


def _read_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value.strip() == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _read_number(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got: '{raw}'")


def _caused_by_timeout(error: BaseException) -> bool:
    """
    Check whether a socket timeout sits in the exception chain.

    smtplib re-raises read timeouts (missing greeting, stalled EHLO, AUTH
    or DATA) as SMTPServerDisconnected, keeping the timeout as __context__.
    """
    seen = set()
    while error is not None and id(error) not in seen:
        if isinstance(error, (TimeoutError, socket.timeout)):
            return True
        seen.add(id(error))
        error = error.__cause__ or error.__context__
    return False


class SmtpMailer:
    """
    Sends OutboundEmail messages through an authenticated SMTP server.

    Attributes:
        host: SMTP server host name
        port: SMTP server port
        username: SMTP account identity
        use_ssl: Implicit TLS (SMTP_SSL) when True, STARTTLS otherwise
        timeout: Socket timeout in seconds
        default_sender: Sender identity used for outgoing messages
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        use_ssl: bool = True,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        default_sender: Optional[str] = None
    ):
        self.host = host
        self.port = port
        self.username = username
        self._password = password
        self.use_ssl = use_ssl
        self.timeout = timeout
        self.default_sender = default_sender or username

    def __repr__(self) -> str:
        return (
            f"SmtpMailer(host={self.host}, port={self.port}, "
            f"username={self.username}, use_ssl={self.use_ssl})"
        )

    @classmethod
    def from_environment(cls) -> 'SmtpMailer':
        """
        Build a mailer from the Lambda environment.

        Returns:
            SmtpMailer: Configured mailer

        Raises:
            ConfigurationError: If SMTP_USER or the credential is missing,
                or a numeric setting is malformed
        """
        username = os.environ.get('SMTP_USER')
        if not username:
            raise ConfigurationError(
                "SMTP_USER environment variable is required but not set. "
                "Please configure this in your SAM template or Lambda environment."
            )

        host = os.environ.get('SMTP_HOST', DEFAULT_SMTP_HOST)
        port = _read_number('SMTP_PORT', DEFAULT_SMTP_PORT)
        timeout = _read_number('SMTP_TIMEOUT', DEFAULT_TIMEOUT_SECONDS)
        use_ssl = _read_bool(os.environ.get('SMTP_USE_SSL'), port == IMPLICIT_TLS_PORT)
        password = secrets_service.get_smtp_password()

        mailer = cls(
            host=host,
            port=port,
            username=username,
            password=password,
            use_ssl=use_ssl,
            timeout=timeout,
            default_sender=os.environ.get('MAIL_FROM') or username
        )
        logger.info(
            f"SMTP mailer initialized: host={host}, port={port}, "
            f"use_ssl={use_ssl}, timeout={timeout}s, max_attempts=1 (no retries)"
        )
        return mailer

    def send(self, outbound: OutboundEmail) -> DeliveryReceipt:
        """
        Deliver a message to the SMTP server.

        Args:
            outbound: Message to send

        Returns:
            DeliveryReceipt: Carries the generated Message-ID

        Raises:
            MailDeliveryError: If the hand-off fails for any transport reason
        """
        message = self._build_message(outbound)
        message_id = message['Message-ID']
        start_time = time.time()

        logger.info(f"Sending email via {self.host}:{self.port} to {outbound.to}")

        try:
            with self._open_connection() as server:
                if not self.use_ssl:
                    server.starttls(context=ssl.create_default_context())
                server.login(self.username, self._password)
                server.send_message(message)

        except smtplib.SMTPAuthenticationError as e:
            raise self._delivery_error(e, AUTH_FAILED) from e
        except (smtplib.SMTPRecipientsRefused, smtplib.SMTPSenderRefused) as e:
            raise self._delivery_error(e, ENVELOPE_REJECTED) from e
        except (smtplib.SMTPServerDisconnected, smtplib.SMTPConnectError) as e:
            code = TIMED_OUT if _caused_by_timeout(e) else CONNECTION_FAILED
            raise self._delivery_error(e, code) from e
        except smtplib.SMTPException as e:
            code = TIMED_OUT if _caused_by_timeout(e) else MESSAGE_FAILED
            raise self._delivery_error(e, code) from e
        except socket.gaierror as e:
            raise self._delivery_error(e, HOST_NOT_FOUND) from e
        except (TimeoutError, socket.timeout) as e:
            raise self._delivery_error(e, TIMED_OUT) from e
        except OSError as e:
            raise self._delivery_error(e, CONNECTION_FAILED) from e

        logger.info(
            f"Email delivered: message_id={message_id}, "
            f"execution_time={time.time() - start_time:.2f}s"
        )
        return DeliveryReceipt(message_id=message_id)

    def _open_connection(self) -> smtplib.SMTP:
        if self.use_ssl:
            return smtplib.SMTP_SSL(
                self.host,
                self.port,
                timeout=self.timeout,
                context=ssl.create_default_context()
            )
        return smtplib.SMTP(self.host, self.port, timeout=self.timeout)

    def _build_message(self, outbound: OutboundEmail) -> EmailMessage:
        """Convert an OutboundEmail into a MIME text/html message."""
        sender_domain = outbound.from_address.rpartition('@')[2] or None

        message = EmailMessage()
        message['From'] = outbound.from_address
        message['To'] = outbound.to
        message['Subject'] = outbound.subject
        message['Message-ID'] = make_msgid(domain=sender_domain)
        message.set_content(outbound.html, subtype='html')
        return message

    def _delivery_error(self, error: Exception, code: str) -> MailDeliveryError:
        logger.error(
            f"SMTP delivery failed: code={code}, host={self.host}, "
            f"error={error.__class__.__name__}: {error}"
        )
        return MailDeliveryError(str(error) or error.__class__.__name__, code=code)
