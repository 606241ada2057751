from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from app.core.firebase_client import get_current_caller
from app.core.repositories.models import Caller, Comment
from app.core.security import validate_video_id
from app.core.store import SocialStore
from app.routers.deps import get_store
from app.schemas import PostCommentRequest

router = APIRouter(prefix="/api", tags=["Comments"])


@router.post("/videos/{video_id}/comments", response_model=Comment, status_code=status.HTTP_201_CREATED)
async def post_comment(
    video_id: str,
    payload: PostCommentRequest,
    caller: Caller = Depends(get_current_caller),
    store: SocialStore = Depends(get_store),
) -> Comment:
    return store.post_comment(caller, validate_video_id(video_id), payload.text)


@router.get("/videos/{video_id}/comments", response_model=List[Comment])
async def get_comments(video_id: str, store: SocialStore = Depends(get_store)) -> List[Comment]:
    return store.get_comments(video_id)


@router.delete("/videos/{video_id}/comments/{timestamp}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    video_id: str,
    timestamp: int,
    seq: Optional[int] = Query(default=None, ge=1),
    caller: Caller = Depends(get_current_caller),
    store: SocialStore = Depends(get_store),
) -> Response:
    """Delete one of the caller's comments, identified by its timestamp (and optionally seq)."""
    store.delete_comment(caller, video_id, timestamp, seq=seq)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me/comments", response_model=List[Comment])
async def get_my_comments(
    caller: Caller = Depends(get_current_caller),
    store: SocialStore = Depends(get_store),
) -> List[Comment]:
    return store.get_my_comments(caller)
