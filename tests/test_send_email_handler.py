"""
Tests for the POST /send Lambda handler.
"""

import base64
import json
import pytest
from unittest.mock import patch
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

import send_email_handler
from domain.errors import MailDeliveryError
from domain.models import DeliveryReceipt


@pytest.fixture
def api_event():
    """Load sample API Gateway event from test data."""
    with open(os.path.join(os.path.dirname(__file__), 'events', 'api-gateway-send.json')) as f:
        return json.load(f)


@pytest.fixture
def mock_mailer():
    """Replace the module-level mailer used by the processor."""
    with patch.object(send_email_handler.email_processor, 'mailer') as mailer:
        mailer.send.return_value = DeliveryReceipt(message_id='<abc123@example.com>')
        yield mailer


def _event_with_body(body, base64_encoded=False):
    return {
        'httpMethod': 'POST',
        'path': '/send',
        'requestContext': {'requestId': 'req-1'},
        'body': body,
        'isBase64Encoded': base64_encoded
    }


def _body(response):
    return json.loads(response['body'])


class TestLambdaHandler:
    """Test the main Lambda handler function."""

    def test_lambda_handler_success(self, api_event, lambda_context, mock_mailer):
        """Test POST {"to":"a@b.com","validationUrl":"https://x/y"} -> 200."""
        response = send_email_handler.lambda_handler(api_event, lambda_context)

        assert response['statusCode'] == 200
        assert response['headers']['Content-Type'] == 'application/json'
        body = _body(response)
        assert body['ok'] is True
        assert body['code'] == 'EMAIL_SENT'
        assert body['data']['messageId'] == '<abc123@example.com>'
        assert body['data']['to'] == 'a@b.com'
        assert body['data']['validationUrl'] == 'https://x/y'
        assert body['data']['subject'] == send_email_handler.email_processor.subject
        mock_mailer.send.assert_called_once()

    def test_lambda_handler_empty_object(self, lambda_context, mock_mailer):
        """Test POST {} -> 400 VALIDATION_ERROR mentioning 'to'."""
        response = send_email_handler.lambda_handler(_event_with_body('{}'), lambda_context)

        assert response['statusCode'] == 400
        body = _body(response)
        assert body['ok'] is False
        assert body['code'] == 'VALIDATION_ERROR'
        assert 'to' in body['message']
        mock_mailer.send.assert_not_called()

    @pytest.mark.parametrize('body', [None, ''])
    def test_lambda_handler_missing_body(self, lambda_context, mock_mailer, body):
        """Test that an absent body is validated like an empty object."""
        response = send_email_handler.lambda_handler(_event_with_body(body), lambda_context)

        assert response['statusCode'] == 400
        assert _body(response)['errors'] == ['to', 'validationUrl']

    def test_lambda_handler_base64_body(self, lambda_context, mock_mailer):
        """Test base64 encoded bodies from HTTP APIs."""
        raw = json.dumps({'to': 'a@b.com', 'validationurl': 'https://x/lower'})
        event = _event_with_body(base64.b64encode(raw.encode('utf-8')).decode('ascii'), True)

        response = send_email_handler.lambda_handler(event, lambda_context)

        assert response['statusCode'] == 200
        assert _body(response)['data']['validationUrl'] == 'https://x/lower'

    @pytest.mark.parametrize('body', ['not valid json', '[1, 2]', '"a@b.com"'])
    def test_lambda_handler_malformed_body(self, lambda_context, mock_mailer, body):
        """Test non-object JSON bodies are a validation error."""
        response = send_email_handler.lambda_handler(_event_with_body(body), lambda_context)

        assert response['statusCode'] == 400
        body = _body(response)
        assert body['code'] == 'VALIDATION_ERROR'
        assert body['message'] == 'request body must be a JSON object'
        mock_mailer.send.assert_not_called()

    def test_lambda_handler_invalid_base64(self, lambda_context, mock_mailer):
        response = send_email_handler.lambda_handler(_event_with_body('%%%', True), lambda_context)

        assert response['statusCode'] == 400

    def test_lambda_handler_direct_invocation(self, lambda_context, mock_mailer):
        """Test a direct invoke where the event is the payload."""
        event = {'to': 'a@b.com', 'validationUrl': 'https://x/y'}

        response = send_email_handler.lambda_handler(event, lambda_context)

        assert response['statusCode'] == 200

    def test_lambda_handler_dict_body(self, lambda_context, mock_mailer):
        """Test a console test event whose body is already a JSON object."""
        event = {'body': {'to': 'a@b.com', 'validationUrl': 'https://x/y'}}

        response = send_email_handler.lambda_handler(event, lambda_context)

        assert response['statusCode'] == 200
        assert _body(response)['data']['to'] == 'a@b.com'

    @pytest.mark.parametrize('body', [['a@b.com'], 42])
    def test_lambda_handler_non_string_body(self, lambda_context, mock_mailer, body):
        """Test that other decoded bodies are a validation error, not a 500."""
        response = send_email_handler.lambda_handler({'body': body}, lambda_context)

        assert response['statusCode'] == 400
        assert _body(response)['code'] == 'VALIDATION_ERROR'
        mock_mailer.send.assert_not_called()

    def test_lambda_handler_delivery_error(self, api_event, lambda_context, mock_mailer):
        """Test a classified transport failure."""
        mock_mailer.send.side_effect = MailDeliveryError('getaddrinfo failed', code='ENOTFOUND')

        response = send_email_handler.lambda_handler(api_event, lambda_context)

        assert response['statusCode'] == 502
        assert _body(response)['code'] == 'SMTP_HOST_NOT_FOUND'

    @patch.dict(os.environ, {'ENVIRONMENT': 'test'})
    def test_lambda_handler_unhandled_error(self, api_event, lambda_context, mock_mailer):
        """Test the catch-all boundary."""
        mock_mailer.send.side_effect = RuntimeError('boom')

        response = send_email_handler.lambda_handler(api_event, lambda_context)

        assert response['statusCode'] == 500
        body = _body(response)
        assert body['ok'] is False
        assert body['code'] == 'UNHANDLED_ERROR'
        assert body['message'] == 'unhandled error'
        assert body['details'] == 'boom'

    @patch.dict(os.environ, {'ENVIRONMENT': 'production'})
    def test_lambda_handler_unhandled_error_production(self, api_event, lambda_context, mock_mailer):
        """Test that production responses never carry details."""
        mock_mailer.send.side_effect = RuntimeError('database password is hunter2')

        response = send_email_handler.lambda_handler(api_event, lambda_context)

        assert response['statusCode'] == 500
        assert 'details' not in _body(response)
        assert 'hunter2' not in response['body']

    @patch.dict(os.environ, {'ENVIRONMENT': 'production'})
    @pytest.mark.parametrize('error', [
        MailDeliveryError('535 auth', code='EAUTH'),
        MailDeliveryError('timeout', code='ETIMEDOUT'),
        MailDeliveryError('weird'),
        ValueError('unexpected'),
    ])
    def test_production_never_returns_details(self, api_event, lambda_context, mock_mailer, error):
        mock_mailer.send.side_effect = error

        response = send_email_handler.lambda_handler(api_event, lambda_context)

        assert 'details' not in _body(response)

    def test_lambda_handler_context_without_request_id(self, api_event, mock_mailer):
        """Test that a bare context object is tolerated."""
        response = send_email_handler.lambda_handler(api_event, object())

        assert response['statusCode'] == 200


class TestHealthCheck:
    """Test health check endpoint."""

    def test_health_check(self, lambda_context):
        response = send_email_handler.health_check({}, lambda_context)

        assert response['statusCode'] == 200
        body = _body(response)
        assert body['ok'] is True
        assert body['data']['status'] == 'healthy'
        assert body['data']['smtpHost'] == send_email_handler.mailer.host
        assert body['data']['mailFromConfigured'] is send_email_handler.MAIL_FROM_CONFIGURED

    @pytest.mark.parametrize('configured', [True, False])
    def test_health_check_reports_mail_from(self, lambda_context, configured):
        """Test that the sender override is reported as configured."""
        with patch.object(send_email_handler, 'MAIL_FROM_CONFIGURED', configured):
            response = send_email_handler.health_check({}, lambda_context)

        assert _body(response)['data']['mailFromConfigured'] is configured
        assert 'senderConfigured' not in _body(response)['data']


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
