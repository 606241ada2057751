from typing import List

from fastapi import APIRouter, Depends, status

from app.core.firebase_client import get_current_caller
from app.core.repositories.models import Caller, VideoAnalytics, WatchEvent
from app.core.security import validate_video_id
from app.core.store import SocialStore
from app.routers.deps import get_store
from app.schemas import LogWatchRequest

router = APIRouter(prefix="/api", tags=["Watch"])


@router.post("/videos/{video_id}/watch", response_model=WatchEvent, status_code=status.HTTP_201_CREATED)
async def log_watch_event(
    video_id: str,
    payload: LogWatchRequest,
    caller: Caller = Depends(get_current_caller),
    store: SocialStore = Depends(get_store),
) -> WatchEvent:
    return store.log_watch_event(
        caller,
        validate_video_id(video_id),
        payload.watch_duration_sec,
        liked=payload.liked,
        completed=payload.completed,
    )


@router.get("/videos/{video_id}/watch", response_model=List[WatchEvent])
async def get_watch_events(video_id: str, store: SocialStore = Depends(get_store)) -> List[WatchEvent]:
    return store.get_watch_events(video_id)


@router.get("/videos/{video_id}/analytics", response_model=VideoAnalytics)
async def get_video_analytics(video_id: str, store: SocialStore = Depends(get_store)) -> VideoAnalytics:
    return store.get_video_analytics(video_id)


@router.get("/me/watch", response_model=List[WatchEvent])
async def get_my_watch_events(
    caller: Caller = Depends(get_current_caller),
    store: SocialStore = Depends(get_store),
) -> List[WatchEvent]:
    return store.get_my_watch_events(caller)
