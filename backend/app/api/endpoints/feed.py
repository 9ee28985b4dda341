from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from app.config.dependency_injection import get_current_user, get_db
from app.models.user import User
from app.schemas.response import StandardResponse
from app.schemas.video import VideoOut
from app.services.feed_service import feed_service

router = APIRouter()


@router.get("", response_model=StandardResponse[List[VideoOut]])
def general_feed(
        limit: int = Query(10, ge=1, le=50),
        before_id: Optional[int] = Query(None, ge=1),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    通用推荐流，用最后一条的 id 作为 before_id 翻页
    """
    videos = feed_service.general(db, current_user, limit=limit, before_id=before_id)
    return StandardResponse(data=[VideoOut.model_validate(v) for v in videos])


@router.get("/following", response_model=StandardResponse[List[VideoOut]])
def following_feed(
        skip: int = Query(0, ge=0),
        limit: int = Query(10, ge=1, le=50),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    videos = feed_service.following(db, current_user, skip=skip, limit=limit)
    return StandardResponse(data=[VideoOut.model_validate(v) for v in videos])
