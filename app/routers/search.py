from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.core.repositories.models import VideoMetadata
from app.core.store import SocialStore
from app.routers.deps import get_store

router = APIRouter(prefix="/api", tags=["Search"])


@router.get("/search", response_model=List[VideoMetadata])
async def search_videos(
    q: str = Query(default="", max_length=200),
    limit: Optional[int] = Query(default=None, ge=0),
    offset: Optional[int] = Query(default=None, ge=0),
    store: SocialStore = Depends(get_store),
) -> List[VideoMetadata]:
    """Title/tag substring search, newest first. An empty query lists recent videos."""
    return store.search_videos(q, limit, offset)


@router.get("/search/tags", response_model=List[VideoMetadata])
async def search_videos_by_tags(
    tag: List[str] = Query(default=[]),
    limit: Optional[int] = Query(default=None, ge=0),
    offset: Optional[int] = Query(default=None, ge=0),
    store: SocialStore = Depends(get_store),
) -> List[VideoMetadata]:
    """Videos carrying every ``tag`` given (repeat the parameter for several)."""
    return store.search_videos_by_tags(tag, limit, offset)


@router.get("/recent", response_model=List[VideoMetadata])
async def list_recent_videos(
    limit: Optional[int] = Query(default=None, ge=0),
    offset: Optional[int] = Query(default=None, ge=0),
    store: SocialStore = Depends(get_store),
) -> List[VideoMetadata]:
    return store.list_recent_videos(limit, offset)
