"""
Repository exceptions for the social store.

Every store operation either returns a value or raises exactly one of these.
Each class carries a stable ``kind`` string used by the HTTP layer.
"""


class RepositoryError(Exception):
    """Base exception for all repository errors."""
    kind = "repository_error"


class StoreBackendError(RepositoryError):
    """Raised when the persistent-map substrate itself fails."""
    kind = "backend_failure"


class NotFoundError(RepositoryError):
    """Raised when an entity, parent or record is absent."""
    kind = "not_found"


class AlreadyExistsError(RepositoryError):
    """Raised on a duplicate create."""
    kind = "already_exists"


class PermissionDeniedError(RepositoryError):
    """Raised when a non-owner attempts a mutation."""
    kind = "permission_denied"


class SelfFollowError(RepositoryError):
    kind = "self_follow"


class AlreadyFollowingError(RepositoryError):
    kind = "already_following"


class NotFollowingError(RepositoryError):
    kind = "not_following"


class SizeLimitExceededError(RepositoryError):
    """Raised when a serialized record or list exceeds its declared bound."""
    kind = "size_limit_exceeded"

    def __init__(self, what: str, size: int, limit: int):
        self.what = what
        self.size = size
        self.limit = limit
        super().__init__(f"{what} is {size} bytes, limit is {limit}")


class UpstreamError(RepositoryError):
    """Raised when a collaborator call (e.g. address resolution) fails."""
    kind = "upstream_failure"
