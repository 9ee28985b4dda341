import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import BadRequestError, NotFoundError
from app.core.permissions import ensure_owner
from app.crud.crud_category import category as crud_category
from app.crud.crud_video import video as crud_video, comment as crud_comment
from app.models.course import Chapter, Course
from app.models.quiz import Quiz
from app.models.user import User
from app.models.video import Comment, SavedKind, SavedVideo, Video, WatchedVideo
from app.schemas.video import CommentCreate, VideoCreate, VideoUpdate
from app.services.quiz_service import build_questions

logger = logging.getLogger(__name__)


class VideoService:
    """短视频的发布、软删除、观看记录、收藏/喜欢和评论"""

    def get_active(self, db: Session, video_id: int) -> Video:
        video = crud_video.get(db, video_id)
        if video is None or video.is_deleted:
            raise NotFoundError("Video not found")
        return video

    def create(self, db: Session, actor: User, payload: VideoCreate) -> Video:
        """
        发布视频，并在同一事务中创建内联测验。

        课程/章节必须属于当前用户；同时指定时章节必须属于该课程。
        """
        if payload.category_id is not None and crud_category.get(db, payload.category_id) is None:
            raise NotFoundError("Category not found")

        course_id = payload.course_id
        if payload.chapter_id is not None:
            chapter = db.get(Chapter, payload.chapter_id)
            if chapter is None:
                raise NotFoundError("Chapter not found")
            if course_id is not None and chapter.course_id != course_id:
                raise BadRequestError("Chapter does not belong to the given course")
            course_id = chapter.course_id
        if course_id is not None:
            course = db.get(Course, course_id)
            if course is None:
                raise NotFoundError("Course not found")
            ensure_owner(course.creator_id, actor, "Not your course")

        video = Video(
            title=payload.title,
            description=payload.description,
            storage_key=payload.storage_key,
            duration_seconds=payload.duration_seconds,
            creator_id=actor.id,
            category_id=payload.category_id,
            course_id=course_id,
            chapter_id=payload.chapter_id,
        )
        if payload.quiz:
            quiz = Quiz(title=f"{payload.title} - Quiz", creator_id=actor.id)
            build_questions(quiz, payload.quiz)
            video.quiz = quiz
        db.add(video)
        db.commit()
        db.refresh(video)
        logger.info(f"User {actor.id} published video {video.id}")
        return video

    def view(self, db: Session, video_id: int, viewer: Optional[User]) -> Video:
        """读取视频详情，同时为观看者记录观看（避免推荐流重复）"""
        video = self.get_active(db, video_id)
        if viewer is not None:
            self.mark_watched(db, video, viewer)
        return video

    def mark_watched(self, db: Session, video: Video, viewer: User) -> bool:
        """幂等地标记已观看，只有首次观看会增加 views_count"""
        exists = (
            db.query(WatchedVideo)
            .filter(WatchedVideo.user_id == viewer.id, WatchedVideo.video_id == video.id)
            .first()
        )
        if exists is not None:
            return False
        db.add(WatchedVideo(user_id=viewer.id, video_id=video.id))
        video.views_count = (video.views_count or 0) + 1
        try:
            db.commit()
        except IntegrityError:
            # 并发的重复标记
            db.rollback()
            return False
        db.refresh(video)
        return True

    def update(self, db: Session, video_id: int, actor: User, payload: VideoUpdate) -> Video:
        video = self.get_active(db, video_id)
        ensure_owner(video.creator_id, actor, "Not your video")
        if payload.category_id is not None and crud_category.get(db, payload.category_id) is None:
            raise NotFoundError("Category not found")
        return crud_video.update(db, db_obj=video, obj_in=payload)

    def soft_delete(self, db: Session, video_id: int, actor: User) -> None:
        video = self.get_active(db, video_id)
        ensure_owner(video.creator_id, actor, "Not your video")
        video.is_deleted = True
        db.commit()
        logger.info(f"User {actor.id} deleted video {video_id}")

    def list_mine(self, db: Session, actor: User, *, skip: int = 0, limit: int = 20) -> List[Video]:
        return crud_video.list_by_creator(db, creator_id=actor.id, skip=skip, limit=limit)

    # ===== Saved / favorites =====

    def list_saved(self, db: Session, actor: User, kind: SavedKind, *, skip: int = 0, limit: int = 20) -> List[Video]:
        return crud_video.list_saved(db, user_id=actor.id, kind=kind, skip=skip, limit=limit)

    def add_saved(self, db: Session, video_id: int, actor: User, kind: SavedKind) -> Video:
        video = self.get_active(db, video_id)
        if self._get_saved(db, actor.id, video.id, kind) is not None:
            return video
        db.add(SavedVideo(user_id=actor.id, video_id=video.id, kind=kind))
        if kind == SavedKind.FAVORITE:
            video.likes_count = (video.likes_count or 0) + 1
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
        db.refresh(video)
        return video

    def remove_saved(self, db: Session, video_id: int, actor: User, kind: SavedKind) -> None:
        entry = self._get_saved(db, actor.id, video_id, kind)
        if entry is None:
            raise NotFoundError(f"Video is not in your {kind.value} list")
        db.delete(entry)
        if kind == SavedKind.FAVORITE:
            video = crud_video.get(db, video_id)
            if video is not None and video.likes_count:
                video.likes_count -= 1
        db.commit()

    # ===== Comments =====

    def add_comment(self, db: Session, video_id: int, actor: User, payload: CommentCreate) -> Comment:
        video = self.get_active(db, video_id)
        comment = Comment(user_id=actor.id, video_id=video.id, text=payload.text)
        db.add(comment)
        video.comments_count = (video.comments_count or 0) + 1
        db.commit()
        db.refresh(comment)
        return comment

    def list_comments(self, db: Session, video_id: int, *, skip: int = 0, limit: int = 50) -> List[Comment]:
        self.get_active(db, video_id)
        return crud_comment.list_for_video(db, video_id=video_id, skip=skip, limit=limit)

    @staticmethod
    def _get_saved(db: Session, user_id: int, video_id: int, kind: SavedKind) -> Optional[SavedVideo]:
        return (
            db.query(SavedVideo)
            .filter(SavedVideo.user_id == user_id, SavedVideo.video_id == video_id, SavedVideo.kind == kind)
            .first()
        )


video_service = VideoService()
