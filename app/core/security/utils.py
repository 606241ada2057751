"""
Security Utilities

Request ID tracking, masking, and security event logging.
"""

import re
import secrets
from typing import Any, Dict, Optional

from fastapi import Request

from app.config import logger, request_id_var
from app.core.security.constants import REQUEST_ID_HEADER

_REQUEST_ID_RE = re.compile(r"^[a-zA-Z0-9_-]+$")


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return secrets.token_hex(16)


def get_request_id(request: Request) -> str:
    """Reuse a well-formed client X-Request-ID or generate a fresh one."""
    request_id = request.headers.get(REQUEST_ID_HEADER)
    if request_id and len(request_id) <= 64 and _REQUEST_ID_RE.match(request_id):
        return request_id
    return generate_request_id()


def mask_sensitive_data(
    data: Dict[str, Any],
    sensitive_keys: frozenset = frozenset({"token", "authorization", "jwt", "secret"})
) -> Dict[str, Any]:
    """
    Mask sensitive data in dictionaries for safe logging.
    """
    masked = {}
    for key, value in data.items():
        key_lower = key.lower()
        if any(s in key_lower for s in sensitive_keys):
            masked[key] = "[REDACTED]"
        elif isinstance(value, dict):
            masked[key] = mask_sensitive_data(value, sensitive_keys)
        else:
            masked[key] = value
    return masked


def log_security_event(
    event_type: str,
    request: Optional[Request] = None,
    user_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    level: str = "warning"
) -> None:
    """
    Log a security-relevant event (permission denials, bad tokens).
    """
    log_data: Dict[str, Any] = {
        "security_event": event_type,
        "user_id": user_id,
        "request_id": request_id_var.get(),
    }

    if request is not None:
        log_data["path"] = str(request.url.path)
        log_data["method"] = request.method

    if details:
        log_data["details"] = mask_sensitive_data(details)

    log_func = getattr(logger, level, logger.warning)
    log_func("Security event: %s | %s", event_type, log_data)
