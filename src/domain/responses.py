"""
Response envelope builder.

Every outcome, success or failure, leaves the service in the same shape:

    {"ok": bool, "code": str, "message": str,
     "data"?: object, "details"?: str, "errors"?: [str]}

wrapped in an API Gateway proxy response (statusCode, headers, body).
"""

import json
import os
from typing import Any, Dict, List, Optional

PRODUCTION_ENVIRONMENTS = ('production', 'prod')

RESPONSE_HEADERS = {
    'Content-Type': 'application/json',
    'Access-Control-Allow-Origin': '*'
}


def is_production() -> bool:
    """Check whether ENVIRONMENT designates a production runtime."""
    environment = os.environ.get('ENVIRONMENT', 'dev')
    return environment.strip().lower() in PRODUCTION_ENVIRONMENTS


def _proxy_response(status: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'statusCode': status,
        'headers': dict(RESPONSE_HEADERS),
        'body': json.dumps(body, ensure_ascii=False)
    }


def success(
    code: str = 'SUCCESS',
    message: str = 'OK',
    data: Optional[Dict[str, Any]] = None,
    status: int = 200
) -> Dict[str, Any]:
    """
    Build a success envelope.

    Args:
        code: Outcome code (e.g. "EMAIL_SENT")
        message: Human-readable message
        data: Payload for the caller (serialized as null when omitted)
        status: HTTP status code

    Returns:
        Dict: Lambda proxy response
    """
    return _proxy_response(status, {
        'ok': True,
        'code': code,
        'message': message,
        'data': data
    })


def failure(
    code: str = 'INTERNAL_ERROR',
    message: str = 'an error occurred',
    details: Optional[str] = None,
    errors: Optional[List[str]] = None,
    status: int = 500
) -> Dict[str, Any]:
    """
    Build an error envelope.

    ``details`` carries internal error text and is dropped entirely in
    production. Absent ``details``/``errors`` are omitted from the body.

    Args:
        code: Domain error code (e.g. "VALIDATION_ERROR")
        message: Caller-facing message
        details: Internal error description (non-production only)
        errors: Field-level problems
        status: HTTP status code

    Returns:
        Dict: Lambda proxy response
    """
    body: Dict[str, Any] = {
        'ok': False,
        'code': code,
        'message': message
    }
    if details and not is_production():
        body['details'] = details
    if errors is not None:
        body['errors'] = list(errors)

    return _proxy_response(status, body)
