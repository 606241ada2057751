from fastapi import Request

from app.core.store import SocialStore


def get_store(request: Request) -> SocialStore:
    """The process-wide store created by the app factory."""
    return request.app.state.store
