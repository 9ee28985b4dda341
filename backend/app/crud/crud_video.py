from typing import List
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase, SortDirection
from app.models.video import Video, SavedVideo, SavedKind, Comment
from app.schemas.video import VideoCreate, VideoUpdate, CommentCreate

NEWEST_FIRST = [("created_at", SortDirection.DESC), ("id", SortDirection.DESC)]


class CRUDVideo(CRUDBase[Video, VideoCreate, VideoUpdate]):
    def list_by_creator(self, db: Session, *, creator_id: int, skip: int = 0, limit: int = 20) -> List[Video]:
        """查询某个创作者未删除的视频"""
        return self.get_multi(
            db,
            skip=skip,
            limit=limit,
            filter_conditions={"creator_id": creator_id, "is_deleted": False},
            sort_by=NEWEST_FIRST
        )

    def list_saved(
        self, db: Session, *, user_id: int, kind: SavedKind, skip: int = 0, limit: int = 20
    ) -> List[Video]:
        """按用户的收藏/喜欢列表查询视频，按加入列表的时间倒序"""
        return (
            db.query(Video)
            .join(SavedVideo, SavedVideo.video_id == Video.id)
            .filter(SavedVideo.user_id == user_id, SavedVideo.kind == kind, Video.is_deleted.is_(False))
            .order_by(SavedVideo.created_at.desc(), SavedVideo.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )


class CRUDComment(CRUDBase[Comment, CommentCreate, CommentCreate]):
    def list_for_video(self, db: Session, *, video_id: int, skip: int = 0, limit: int = 50) -> List[Comment]:
        return self.get_multi(
            db,
            skip=skip,
            limit=limit,
            filter_conditions={"video_id": video_id},
            sort_by=NEWEST_FIRST
        )


video = CRUDVideo(Video)
comment = CRUDComment(Comment)
