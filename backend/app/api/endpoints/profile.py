from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List

from app.config.dependency_injection import get_current_user, get_db
from app.crud.crud_user import user as crud_user
from app.models.user import User
from app.schemas.course import CourseOut
from app.schemas.response import StandardResponse
from app.schemas.user import ProfilePut, ProfileUpdate, UserOut
from app.schemas.video import VideoOut
from app.services.course_service import course_service
from app.services.preference_service import preference_service
from app.services.video_service import video_service

router = APIRouter()


@router.get("/me", response_model=StandardResponse[UserOut])
def get_me(current_user: User = Depends(get_current_user)):
    return StandardResponse(data=UserOut.model_validate(current_user))


@router.patch("/me", response_model=StandardResponse[UserOut])
def update_me(
        payload: ProfileUpdate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    updated = crud_user.update(db, db_obj=current_user, obj_in=payload)
    return StandardResponse(data=UserOut.model_validate(updated))


@router.put("", response_model=StandardResponse[UserOut])
def replace_profile(
        payload: ProfilePut,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    更新名称、简介，并可整体替换分类偏好

    偏好替换只flush，与资料更新在同一次提交中生效
    """
    if payload.preferences is not None:
        preference_service.replace(db, current_user, payload.preferences, commit=False)
    updated = crud_user.update(db, db_obj=current_user, obj_in=payload.model_dump(exclude_unset=True, exclude={"preferences"}))
    return StandardResponse(data=UserOut.model_validate(updated))


@router.get("/videos", response_model=StandardResponse[List[VideoOut]])
def my_videos(
        skip: int = Query(0, ge=0),
        limit: int = Query(20, ge=1, le=100),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    videos = video_service.list_mine(db, current_user, skip=skip, limit=limit)
    return StandardResponse(data=[VideoOut.model_validate(v) for v in videos])


@router.get("/courses", response_model=StandardResponse[List[CourseOut]])
def my_courses(
        skip: int = Query(0, ge=0),
        limit: int = Query(20, ge=1, le=100),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    courses = course_service.list_mine(db, current_user, skip=skip, limit=limit)
    return StandardResponse(data=[CourseOut.model_validate(c) for c in courses])
