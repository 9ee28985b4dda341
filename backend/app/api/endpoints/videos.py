from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.config.dependency_injection import get_current_user, get_db, get_optional_user, get_upload_service
from app.models.user import User
from app.models.video import SavedKind
from app.schemas.response import StandardResponse
from app.schemas.video import CommentCreate, CommentOut, StreamUrlOut, VideoCreate, VideoOut, VideoUpdate
from app.services.upload_service import UploadService
from app.services.video_service import video_service

router = APIRouter()


@router.post("", response_model=StandardResponse[VideoOut], status_code=status.HTTP_201_CREATED)
def create_video(
        payload: VideoCreate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    发布视频（时长1-90秒），可同时提交内联测验题目
    """
    video = video_service.create(db, current_user, payload)
    return StandardResponse(code=status.HTTP_201_CREATED, data=VideoOut.model_validate(video))


# ===== 当前用户的列表（必须在 /{video_id} 之前注册） =====

@router.get("/mine", response_model=StandardResponse[List[VideoOut]])
def list_my_videos(
        skip: int = Query(0, ge=0),
        limit: int = Query(20, ge=1, le=100),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    videos = video_service.list_mine(db, current_user, skip=skip, limit=limit)
    return StandardResponse(data=[VideoOut.model_validate(v) for v in videos])


@router.get("/saved", response_model=StandardResponse[List[VideoOut]])
def list_saved_videos(
        skip: int = Query(0, ge=0),
        limit: int = Query(20, ge=1, le=100),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    videos = video_service.list_saved(db, current_user, SavedKind.SAVED, skip=skip, limit=limit)
    return StandardResponse(data=[VideoOut.model_validate(v) for v in videos])


@router.get("/favorites", response_model=StandardResponse[List[VideoOut]])
def list_favorite_videos(
        skip: int = Query(0, ge=0),
        limit: int = Query(20, ge=1, le=100),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    videos = video_service.list_saved(db, current_user, SavedKind.FAVORITE, skip=skip, limit=limit)
    return StandardResponse(data=[VideoOut.model_validate(v) for v in videos])


# ===== 单个视频 =====

@router.get("/{video_id}", response_model=StandardResponse[VideoOut])
def read_video(
        video_id: int,
        viewer: Optional[User] = Depends(get_optional_user),
        db: Session = Depends(get_db)
):
    video = video_service.view(db, video_id, viewer)
    return StandardResponse(data=VideoOut.model_validate(video))


@router.patch("/{video_id}", response_model=StandardResponse[VideoOut])
def update_video(
        video_id: int,
        payload: VideoUpdate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    video = video_service.update(db, video_id, current_user, payload)
    return StandardResponse(data=VideoOut.model_validate(video))


@router.delete("/{video_id}", response_model=StandardResponse[None])
def delete_video(
        video_id: int,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    video_service.soft_delete(db, video_id, current_user)
    return StandardResponse(message="Video deleted")


@router.post("/{video_id}/watch", response_model=StandardResponse[VideoOut])
def mark_watched(
        video_id: int,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    video = video_service.get_active(db, video_id)
    video_service.mark_watched(db, video, current_user)
    return StandardResponse(data=VideoOut.model_validate(video))


@router.post("/{video_id}/saved", response_model=StandardResponse[VideoOut])
def save_video(
        video_id: int,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    video = video_service.add_saved(db, video_id, current_user, SavedKind.SAVED)
    return StandardResponse(message="Saved", data=VideoOut.model_validate(video))


@router.delete("/{video_id}/saved", response_model=StandardResponse[None])
def unsave_video(
        video_id: int,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    video_service.remove_saved(db, video_id, current_user, SavedKind.SAVED)
    return StandardResponse(message="Removed from saved")


@router.post("/{video_id}/favorite", response_model=StandardResponse[VideoOut])
def favorite_video(
        video_id: int,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    video = video_service.add_saved(db, video_id, current_user, SavedKind.FAVORITE)
    return StandardResponse(message="Added to favorites", data=VideoOut.model_validate(video))


@router.delete("/{video_id}/favorite", response_model=StandardResponse[None])
def unfavorite_video(
        video_id: int,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    video_service.remove_saved(db, video_id, current_user, SavedKind.FAVORITE)
    return StandardResponse(message="Removed from favorites")


@router.get("/{video_id}/comments", response_model=StandardResponse[List[CommentOut]])
def list_comments(
        video_id: int,
        skip: int = Query(0, ge=0),
        limit: int = Query(50, ge=1, le=100),
        db: Session = Depends(get_db)
):
    comments = video_service.list_comments(db, video_id, skip=skip, limit=limit)
    return StandardResponse(data=[CommentOut.model_validate(c) for c in comments])


@router.post("/{video_id}/comments", response_model=StandardResponse[CommentOut], status_code=status.HTTP_201_CREATED)
def add_comment(
        video_id: int,
        payload: CommentCreate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    comment = video_service.add_comment(db, video_id, current_user, payload)
    return StandardResponse(code=status.HTTP_201_CREATED, data=CommentOut.model_validate(comment))


@router.get("/{video_id}/stream-url", response_model=StandardResponse[StreamUrlOut])
def stream_url(
        video_id: int,
        db: Session = Depends(get_db),
        upload_service: UploadService = Depends(get_upload_service)
):
    """
    为视频的存储 key 生成短时效的播放地址
    """
    video = video_service.get_active(db, video_id)
    signed = upload_service.sign_get(video.storage_key)
    return StandardResponse(data=StreamUrlOut(**signed))
