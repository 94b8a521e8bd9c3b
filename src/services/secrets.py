"""
SMTP credential resolution.

The credential comes from AWS Secrets Manager when SMTP_PASSWORD_SECRET_ID
is set, otherwise from SMTP_PASSWORD. There is no built-in fallback: a
missing credential is a ConfigurationError at cold start.
"""

import json
import logging
import os
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Configure Secrets Manager client with timeouts to prevent infinite hangs
secrets_config = Config(
    retries={
        'max_attempts': 1,  # 1 attempt total (no retries)
        'mode': 'standard'
    },
    connect_timeout=5,
    read_timeout=10
)

region = os.environ.get('AWS_REGION', os.environ.get('AWS_DEFAULT_REGION', 'us-east-1'))

# Initialize client at module level (thread-safe, reused across invocations)
secrets_client = boto3.client('secretsmanager', region_name=region, config=secrets_config)


def _read_secret(secret_id: str) -> str:
    """
    Fetch a secret string from Secrets Manager.

    A JSON secret is accepted too, in which case its "password" key is used
    (the shape the Secrets Manager console creates for credentials).

    Raises:
        ConfigurationError: If the secret cannot be read or is empty
    """
    try:
        response = secrets_client.get_secret_value(SecretId=secret_id)
    except ClientError as e:
        error_code = e.response.get('Error', {}).get('Code', 'Unknown')
        raise ConfigurationError(
            f"Could not read SMTP credential from Secrets Manager "
            f"({secret_id}): {error_code}"
        ) from e

    secret = response.get('SecretString') or ''
    if secret.startswith('{'):
        try:
            secret = json.loads(secret).get('password', '')
        except (json.JSONDecodeError, AttributeError):
            raise ConfigurationError(
                f"Secret {secret_id} is not valid JSON or lacks a 'password' key"
            )

    if not secret:
        raise ConfigurationError(f"Secret {secret_id} holds an empty SMTP credential")

    logger.info(f"SMTP credential loaded from Secrets Manager: {secret_id}")
    return secret


def get_smtp_password(secret_id: Optional[str] = None) -> str:
    """
    Resolve the SMTP credential.

    Args:
        secret_id: Secrets Manager id; defaults to SMTP_PASSWORD_SECRET_ID

    Returns:
        str: The credential (never logged)

    Raises:
        ConfigurationError: If no credential is configured
    """
    secret_id = secret_id or os.environ.get('SMTP_PASSWORD_SECRET_ID')
    if secret_id:
        return _read_secret(secret_id)

    password = os.environ.get('SMTP_PASSWORD')
    if not password:
        raise ConfigurationError(
            "SMTP credential is not configured. Set SMTP_PASSWORD_SECRET_ID "
            "(Secrets Manager) or SMTP_PASSWORD in the Lambda environment."
        )

    logger.info("SMTP credential loaded from environment")
    return password
