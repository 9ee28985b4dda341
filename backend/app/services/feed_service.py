import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.category import UserCategoryPreference
from app.models.follow import Follow
from app.models.user import User
from app.models.video import Video, WatchedVideo

logger = logging.getLogger(__name__)


class FeedService:
    """推荐流

    通用推荐：优先用户偏好分类、排除已观看、按 id 倒序游标分页。
    关注推荐：只包含关注的创作者发布的视频。
    """

    def general(self, db: Session, user: User, *, limit: int = 10, before_id: Optional[int] = None) -> List[Video]:
        preferred = select(UserCategoryPreference.category_id).where(UserCategoryPreference.user_id == user.id)
        watched = select(WatchedVideo.video_id).where(WatchedVideo.user_id == user.id)

        query = db.query(Video).filter(Video.is_deleted.is_(False), Video.id.notin_(watched))
        if db.execute(preferred.limit(1)).first() is not None:
            query = query.filter(Video.category_id.in_(preferred))
        if before_id is not None:
            query = query.filter(Video.id < before_id)
        videos = query.order_by(Video.id.desc()).limit(limit).all()
        logger.debug(f"General feed for user {user.id}: {len(videos)} videos")
        return videos

    def following(self, db: Session, user: User, *, skip: int = 0, limit: int = 10) -> List[Video]:
        followees = select(Follow.followee_id).where(Follow.follower_id == user.id)
        return (
            db.query(Video)
            .filter(Video.is_deleted.is_(False), Video.creator_id.in_(followees))
            .order_by(Video.created_at.desc(), Video.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )


feed_service = FeedService()
