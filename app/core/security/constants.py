"""
Security Constants

Centralized constants for input validation and request tracing.
"""

# Identifier bounds
MAX_VIDEO_ID_LENGTH = 100
MAX_USER_ID_LENGTH = 128

# Video metadata
MAX_TITLE_LENGTH = 200
MAX_TAGS = 20
MAX_TAG_LENGTH = 40
MAX_STORAGE_REF_LENGTH = 300

# Social records
MAX_COMMENT_LENGTH = 1000
MAX_NAME_LENGTH = 100
MAX_AVATAR_URL_LENGTH = 300
MAX_TX_HASH_LENGTH = 100

# Request ID header
REQUEST_ID_HEADER = "X-Request-ID"
