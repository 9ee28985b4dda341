import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import BadRequestError, ConflictError, NotFoundError
from app.crud.crud_user import user as crud_user
from app.models.follow import Follow
from app.models.user import User

logger = logging.getLogger(__name__)


class FollowService:
    """关注关系

    重复关注返回冲突（409），而不是静默成功。
    """

    def follow(self, db: Session, actor: User, target_user_id: int) -> Follow:
        if actor.id == target_user_id:
            raise BadRequestError("Cannot follow yourself")
        if crud_user.get(db, target_user_id) is None:
            raise NotFoundError("User not found")
        if self._get_edge(db, actor.id, target_user_id) is not None:
            raise ConflictError("Already following this user")

        edge = Follow(follower_id=actor.id, followee_id=target_user_id)
        db.add(edge)
        try:
            db.commit()
        except IntegrityError as e:
            # 并发的重复关注由唯一约束兜底
            db.rollback()
            raise ConflictError("Already following this user") from e
        db.refresh(edge)
        logger.info(f"User {actor.id} followed user {target_user_id}")
        return edge

    def unfollow(self, db: Session, actor: User, target_user_id: int) -> None:
        edge = self._get_edge(db, actor.id, target_user_id)
        if edge is None:
            raise NotFoundError("Not following this user")
        db.delete(edge)
        db.commit()
        logger.info(f"User {actor.id} unfollowed user {target_user_id}")

    def list_following(self, db: Session, user: User, *, skip: int = 0, limit: int = 20) -> List[User]:
        return (
            db.query(User)
            .join(Follow, Follow.followee_id == User.id)
            .filter(Follow.follower_id == user.id)
            .order_by(Follow.created_at.desc(), Follow.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def list_followers(self, db: Session, user: User, *, skip: int = 0, limit: int = 20) -> List[User]:
        return (
            db.query(User)
            .join(Follow, Follow.follower_id == User.id)
            .filter(Follow.followee_id == user.id)
            .order_by(Follow.created_at.desc(), Follow.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_followers(self, db: Session, user_id: int) -> int:
        return db.query(Follow).filter(Follow.followee_id == user_id).count()

    def count_following(self, db: Session, user_id: int) -> int:
        return db.query(Follow).filter(Follow.follower_id == user_id).count()

    def following_ids(self, db: Session, user_id: int) -> List[int]:
        return [row[0] for row in db.query(Follow.followee_id).filter(Follow.follower_id == user_id).all()]

    @staticmethod
    def _get_edge(db: Session, follower_id: int, followee_id: int):
        return (
            db.query(Follow)
            .filter(Follow.follower_id == follower_id, Follow.followee_id == followee_id)
            .first()
        )


follow_service = FollowService()
