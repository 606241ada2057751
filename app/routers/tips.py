from typing import List

from fastapi import APIRouter, Depends, status

from app.config import logger
from app.core.firebase_client import get_current_caller
from app.core.repositories.models import Caller, TipRecord
from app.core.security import validate_video_id
from app.core.store import SocialStore
from app.routers.deps import get_store
from app.schemas import RecordTipRequest

router = APIRouter(prefix="/api", tags=["Tips"])


@router.post("/videos/{video_id}/tips", response_model=TipRecord, status_code=status.HTTP_201_CREATED)
async def record_tip(
    video_id: str,
    payload: RecordTipRequest,
    caller: Caller = Depends(get_current_caller),
    store: SocialStore = Depends(get_store),
) -> TipRecord:
    """Record an on-chain tip the caller already sent to the video's uploader."""
    tip = await store.record_tip(caller, validate_video_id(video_id), payload.amount, payload.tx_hash)
    logger.info("Tip of %d on %s recorded (tx %s)", tip.amount, video_id, tip.tx_hash)
    return tip


@router.get("/videos/{video_id}/tips", response_model=List[TipRecord])
async def get_tips_for_video(video_id: str, store: SocialStore = Depends(get_store)) -> List[TipRecord]:
    return store.get_tips_for_video(video_id)


@router.get("/me/tips/sent", response_model=List[TipRecord])
async def get_my_sent_tips(
    caller: Caller = Depends(get_current_caller),
    store: SocialStore = Depends(get_store),
) -> List[TipRecord]:
    return await store.get_my_sent_tips(caller)


@router.get("/me/tips/received", response_model=List[TipRecord])
async def get_my_received_tips(
    caller: Caller = Depends(get_current_caller),
    store: SocialStore = Depends(get_store),
) -> List[TipRecord]:
    return await store.get_my_received_tips(caller)
