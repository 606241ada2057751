"""
Security module for reelstore.

Provides:
- Input validation and sanitization
- Request ID tracking
- Security event logging
"""

from app.core.security.constants import (
    MAX_COMMENT_LENGTH,
    MAX_TAG_LENGTH,
    MAX_TAGS,
    MAX_TITLE_LENGTH,
    REQUEST_ID_HEADER,
)
from app.core.security.validation import (
    ValidationError,
    sanitize_text,
    validate_comment_text,
    validate_page,
    validate_storage_ref,
    validate_tags,
    validate_title,
    validate_tx_hash,
    validate_user_id,
    validate_video_id,
)
from app.core.security.utils import (
    generate_request_id,
    get_request_id,
    log_security_event,
    mask_sensitive_data,
)

__all__ = [
    # Constants
    "MAX_COMMENT_LENGTH",
    "MAX_TAG_LENGTH",
    "MAX_TAGS",
    "MAX_TITLE_LENGTH",
    "REQUEST_ID_HEADER",
    # Validation
    "ValidationError",
    "sanitize_text",
    "validate_comment_text",
    "validate_page",
    "validate_storage_ref",
    "validate_tags",
    "validate_title",
    "validate_tx_hash",
    "validate_user_id",
    "validate_video_id",
    # Utils
    "generate_request_id",
    "get_request_id",
    "log_security_event",
    "mask_sensitive_data",
]
