from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List

from app.config.dependency_injection import get_current_user, get_db, require_admin
from app.core.exceptions import NotFoundError
from app.crud.crud_course import course as crud_course
from app.crud.crud_user import user as crud_user
from app.crud.crud_video import video as crud_video
from app.models.user import User
from app.schemas.course import CourseOut
from app.schemas.profile import PublicProfile
from app.schemas.response import StandardResponse
from app.schemas.user import RoleUpdate, UserOut, UserSummary
from app.schemas.video import VideoOut
from app.services.follow_service import follow_service

router = APIRouter()


@router.get("/me", response_model=StandardResponse[UserOut])
def read_current_user(current_user: User = Depends(get_current_user)):
    """
    获取当前用户；外部身份首次访问时会自动建档
    """
    return StandardResponse(data=UserOut.model_validate(current_user))


@router.get("/search", response_model=StandardResponse[List[UserSummary]])
def search_users(
        q: str = Query("", max_length=100),
        skip: int = Query(0, ge=0),
        limit: int = Query(20, ge=1, le=100),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    users = crud_user.search(db, q=q, skip=skip, limit=limit)
    return StandardResponse(data=[UserSummary.model_validate(u) for u in users])


@router.get("/{user_id}", response_model=StandardResponse[PublicProfile])
def read_public_profile(user_id: int, db: Session = Depends(get_db)):
    """
    公开主页：已发布课程与未删除的视频
    """
    target = crud_user.get(db, user_id)
    if target is None:
        raise NotFoundError("User not found")

    courses = crud_course.list_by_creator(db, creator_id=target.id, published_only=True)
    videos = crud_video.list_by_creator(db, creator_id=target.id)
    profile = PublicProfile(
        id=target.id,
        name=target.name,
        username=target.username,
        avatar_url=target.avatar_url,
        role=target.role,
        bio=target.bio,
        follower_count=follow_service.count_followers(db, target.id),
        following_count=follow_service.count_following(db, target.id),
        courses=[CourseOut.model_validate(c) for c in courses],
        videos=[VideoOut.model_validate(v) for v in videos],
    )
    return StandardResponse(data=profile)


@router.patch("/{user_id}/role", response_model=StandardResponse[UserOut])
def update_role(
        user_id: int,
        payload: RoleUpdate,
        admin: User = Depends(require_admin),
        db: Session = Depends(get_db)
):
    target = crud_user.get(db, user_id)
    if target is None:
        raise NotFoundError("User not found")
    updated = crud_user.update(db, db_obj=target, obj_in={"role": payload.role})
    return StandardResponse(message="Role updated", data=UserOut.model_validate(updated))
