"""
Pytest configuration and fixtures for all tests.
"""

import os
import sys
import pytest

# Add src to Python path before any imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

# Set up test environment variables before importing any modules
os.environ.setdefault('SMTP_USER', 'notifications@example.com')
os.environ.setdefault('SMTP_PASSWORD', 'test-app-password')
os.environ.setdefault('SMTP_HOST', 'smtp.example.com')
os.environ.setdefault('AWS_DEFAULT_REGION', 'us-east-1')
os.environ.setdefault('ENVIRONMENT', 'test')
os.environ.setdefault('LOG_LEVEL', 'INFO')
# Never reach Secrets Manager from the test suite
os.environ.pop('SMTP_PASSWORD_SECRET_ID', None)


@pytest.fixture
def lambda_context():
    """Mock Lambda context."""
    from unittest.mock import Mock

    context = Mock()
    context.aws_request_id = "test-request-id"
    context.invoked_function_arn = "arn:aws:lambda:us-east-1:123456789012:function:send-email-test"
    context.function_name = "send-email-test"
    return context
