from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List

from app.config.dependency_injection import get_current_user, get_db
from app.models.user import User
from app.schemas.follow import FollowOut, FollowRequest
from app.schemas.response import StandardResponse
from app.schemas.user import UserSummary
from app.services.follow_service import follow_service

router = APIRouter()


@router.post("", response_model=StandardResponse[FollowOut], status_code=status.HTTP_201_CREATED)
def follow_user(
        payload: FollowRequest,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    edge = follow_service.follow(db, current_user, payload.user_id)
    return StandardResponse(code=status.HTTP_201_CREATED, message="Followed", data=FollowOut.model_validate(edge))


@router.delete("", response_model=StandardResponse[None])
def unfollow_user(
        payload: FollowRequest = Body(...),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    follow_service.unfollow(db, current_user, payload.user_id)
    return StandardResponse(message="Unfollowed")


@router.get("/following", response_model=StandardResponse[List[UserSummary]])
def list_following(
        skip: int = Query(0, ge=0),
        limit: int = Query(20, ge=1, le=100),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    users = follow_service.list_following(db, current_user, skip=skip, limit=limit)
    return StandardResponse(data=[UserSummary.model_validate(u) for u in users])


@router.get("/followers", response_model=StandardResponse[List[UserSummary]])
def list_followers(
        skip: int = Query(0, ge=0),
        limit: int = Query(20, ge=1, le=100),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    users = follow_service.list_followers(db, current_user, skip=skip, limit=limit)
    return StandardResponse(data=[UserSummary.model_validate(u) for u in users])
