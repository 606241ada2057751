from typing import List

from fastapi import APIRouter, Depends, Response, status

from app.config import logger
from app.core.firebase_client import get_current_caller
from app.core.repositories.models import Caller, VideoMetadata
from app.core.security import validate_user_id, validate_video_id
from app.core.store import SocialStore
from app.routers.deps import get_store
from app.schemas import CreateVideoRequest, UpdateVideoRequest

router = APIRouter(prefix="/api", tags=["Videos"])


@router.post("/videos", response_model=VideoMetadata, status_code=status.HTTP_201_CREATED)
async def create_video(
    payload: CreateVideoRequest,
    caller: Caller = Depends(get_current_caller),
    store: SocialStore = Depends(get_store),
) -> VideoMetadata:
    """Register metadata for an uploaded video. The caller becomes its owner."""
    video = store.create_video(
        caller,
        payload.video_id,
        payload.title,
        tags=payload.tags,
        storage_ref=payload.storage_ref,
    )
    logger.info("Video %s created by %s", video.video_id, caller.uid)
    return video


@router.get("/videos", response_model=List[VideoMetadata])
async def list_all_videos(store: SocialStore = Depends(get_store)) -> List[VideoMetadata]:
    return store.list_all_videos()


@router.get("/videos/tag/{tag}", response_model=List[VideoMetadata])
async def list_videos_by_tag(tag: str, store: SocialStore = Depends(get_store)) -> List[VideoMetadata]:
    return store.list_videos_by_tag(tag)


@router.get("/users/{user_id}/videos", response_model=List[VideoMetadata])
async def list_videos_by_uploader(
    user_id: str,
    store: SocialStore = Depends(get_store),
) -> List[VideoMetadata]:
    return store.list_videos_by_uploader(validate_user_id(user_id))


@router.get("/videos/{video_id}", response_model=VideoMetadata)
async def get_video_metadata(video_id: str, store: SocialStore = Depends(get_store)) -> VideoMetadata:
    return store.get_video(validate_video_id(video_id))


@router.patch("/videos/{video_id}", response_model=VideoMetadata)
async def update_video_metadata(
    video_id: str,
    payload: UpdateVideoRequest,
    caller: Caller = Depends(get_current_caller),
    store: SocialStore = Depends(get_store),
) -> VideoMetadata:
    return store.update_video(
        caller,
        validate_video_id(video_id),
        title=payload.title,
        tags=payload.tags,
        storage_ref=payload.storage_ref,
    )


@router.delete("/videos/{video_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_video(
    video_id: str,
    caller: Caller = Depends(get_current_caller),
    store: SocialStore = Depends(get_store),
) -> Response:
    """
    Delete a video's metadata (owner only).

    Comments, tips and watch events stay reachable by the video id.
    """
    store.delete_video(caller, validate_video_id(video_id))
    logger.info("Video %s deleted by %s", video_id, caller.uid)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
