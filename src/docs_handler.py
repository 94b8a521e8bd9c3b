"""
AWS Lambda handler for GET /api-docs.

Returns the OpenAPI 3.0 document for the mail API. Any Swagger UI is
hosted elsewhere and points at this endpoint.
"""

import json
import logging
from typing import Any, Dict

from domain.responses import RESPONSE_HEADERS

logger = logging.getLogger(__name__)


def _error_response(description: str) -> Dict[str, Any]:
    return {
        'description': description,
        'content': {
            'application/json': {
                'schema': {'$ref': '#/components/schemas/ErrorResponse'}
            }
        }
    }


OPENAPI_DOCUMENT: Dict[str, Any] = {
    'openapi': '3.0.0',
    'info': {
        'title': 'Unify Mail API',
        'version': '1.0.0',
        'description': 'API for sending welcome emails with a validation link',
    },
    'paths': {
        '/send': {
            'post': {
                'summary': 'Send a welcome email with a validation link',
                'requestBody': {
                    'required': True,
                    'content': {
                        'application/json': {
                            'schema': {
                                'type': 'object',
                                'required': ['to', 'validationUrl'],
                                'properties': {
                                    'to': {
                                        'type': 'string',
                                        'example': 'recipient@example.com'
                                    },
                                    'validationUrl': {
                                        'type': 'string',
                                        'example': 'https://example.com/validate/abcd1234'
                                    },
                                    'validationurl': {
                                        'type': 'string',
                                        'description': 'Lower-case alias of validationUrl'
                                    }
                                }
                            }
                        }
                    }
                },
                'responses': {
                    '200': {
                        'description': 'Email sent',
                        'content': {
                            'application/json': {
                                'schema': {'$ref': '#/components/schemas/SuccessResponse'}
                            }
                        }
                    },
                    '400': _error_response('Request validation error'),
                    '401': _error_response('SMTP authentication error'),
                    '502': _error_response('SMTP host not found'),
                    '504': _error_response('SMTP timeout'),
                    '500': _error_response('Email could not be sent'),
                }
            }
        }
    },
    'components': {
        'schemas': {
            'SuccessResponse': {
                'type': 'object',
                'properties': {
                    'ok': {'type': 'boolean', 'example': True},
                    'code': {'type': 'string', 'example': 'EMAIL_SENT'},
                    'message': {'type': 'string', 'example': 'email sent successfully'},
                    'data': {
                        'type': 'object',
                        'example': {
                            'messageId': '<abc123@example.com>',
                            'to': 'recipient@example.com',
                            'subject': 'Welcome',
                            'validationUrl': 'https://example.com/validate/xyz'
                        }
                    }
                }
            },
            'ErrorResponse': {
                'type': 'object',
                'properties': {
                    'ok': {'type': 'boolean', 'example': False},
                    'code': {'type': 'string', 'example': 'VALIDATION_ERROR'},
                    'message': {'type': 'string', 'example': "the 'to' field is required"},
                    'details': {
                        'type': 'string',
                        'description': 'Internal error text, omitted in production'
                    },
                    'errors': {
                        'type': 'array',
                        'items': {'type': 'string'},
                        'example': ['to']
                    }
                }
            }
        }
    }
}


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Serve the OpenAPI document."""
    logger.info("Serving OpenAPI document")
    return {
        'statusCode': 200,
        'headers': dict(RESPONSE_HEADERS),
        'body': json.dumps(OPENAPI_DOCUMENT)
    }
