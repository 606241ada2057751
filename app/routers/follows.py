from typing import List

from fastapi import APIRouter, Depends, Response, status

from app.core.firebase_client import get_current_caller
from app.core.repositories.models import Caller, FollowRelationship
from app.core.store import SocialStore
from app.routers.deps import get_store
from app.schemas import FollowStatusResponse

router = APIRouter(prefix="/api", tags=["Follows"])


@router.post("/users/{user_id}/follow", response_model=FollowRelationship, status_code=status.HTTP_201_CREATED)
async def follow_user(
    user_id: str,
    caller: Caller = Depends(get_current_caller),
    store: SocialStore = Depends(get_store),
) -> FollowRelationship:
    return store.follow_user(caller, user_id)


@router.delete("/users/{user_id}/follow", status_code=status.HTTP_204_NO_CONTENT)
async def unfollow_user(
    user_id: str,
    caller: Caller = Depends(get_current_caller),
    store: SocialStore = Depends(get_store),
) -> Response:
    store.unfollow_user(caller, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/users/{user_id}/followers", response_model=List[str])
async def get_followers(user_id: str, store: SocialStore = Depends(get_store)) -> List[str]:
    return store.get_followers(user_id)


@router.get("/users/{user_id}/following", response_model=List[str])
async def get_following(user_id: str, store: SocialStore = Depends(get_store)) -> List[str]:
    return store.get_following(user_id)


@router.get("/follows/{follower}/{followed}", response_model=FollowStatusResponse)
async def is_following(follower: str, followed: str, store: SocialStore = Depends(get_store)) -> FollowStatusResponse:
    return FollowStatusResponse(
        follower=follower,
        followed=followed,
        following=store.is_following(follower, followed),
    )
