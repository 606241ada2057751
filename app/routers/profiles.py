from typing import List

from fastapi import APIRouter, Depends

from app.core.firebase_client import get_current_caller
from app.core.repositories.models import Caller, UserProfile
from app.core.security import validate_user_id
from app.core.store import SocialStore
from app.routers.deps import get_store
from app.schemas import ProfileEntry, SaveProfileRequest

router = APIRouter(prefix="/api", tags=["Profiles"])


@router.put("/profile/me", response_model=UserProfile)
async def save_my_profile(
    payload: SaveProfileRequest,
    caller: Caller = Depends(get_current_caller),
    store: SocialStore = Depends(get_store),
) -> UserProfile:
    """Save the caller's profile; the address comes from the caller's identity."""
    return await store.save_my_profile(caller, payload.name, payload.avatar_url)


@router.get("/profile/me", response_model=UserProfile)
async def get_my_profile(
    caller: Caller = Depends(get_current_caller),
    store: SocialStore = Depends(get_store),
) -> UserProfile:
    return store.get_my_profile(caller)


@router.get("/profiles", response_model=List[ProfileEntry])
async def list_profiles(
    caller: Caller = Depends(get_current_caller),
    store: SocialStore = Depends(get_store),
) -> List[ProfileEntry]:
    return [ProfileEntry(user_id=uid, profile=profile) for uid, profile in store.list_profiles()]


@router.get("/profiles/{user_id}", response_model=UserProfile)
async def get_profile(
    user_id: str,
    store: SocialStore = Depends(get_store),
) -> UserProfile:
    return store.get_profile(validate_user_id(user_id))
