import logging
from typing import Iterable, List

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.models.category import Category, UserCategoryPreference
from app.models.user import User

logger = logging.getLogger(__name__)


class PreferenceService:
    """用户分类偏好：整体替换语义"""

    def get_category_ids(self, db: Session, user: User) -> List[int]:
        rows = (
            db.query(UserCategoryPreference.category_id)
            .filter(UserCategoryPreference.user_id == user.id)
            .order_by(UserCategoryPreference.category_id.asc())
            .all()
        )
        return [row[0] for row in rows]

    def replace(self, db: Session, user: User, category_ids: Iterable[int], *, commit: bool = True) -> List[int]:
        """
        用新的分类集合整体替换用户偏好（删除全部旧记录后插入新记录，权重为1）。

        删除与插入处于同一事务：任何一步失败都会回滚，旧集合保持不变。

        Args:
            db: 数据库会话
            user: 当前用户
            category_ids: 新的分类ID，重复值会被合并
            commit: 为False时由调用方提交（例如注册流程）

        Raises:
            NotFoundError: 存在未知的分类ID
        """
        wanted = sorted(set(category_ids))
        try:
            if wanted:
                found = {
                    row[0] for row in db.query(Category.id).filter(Category.id.in_(wanted)).all()
                }
                missing = [cid for cid in wanted if cid not in found]
                if missing:
                    raise NotFoundError(f"Unknown category ids: {missing}")

            db.query(UserCategoryPreference).filter(
                UserCategoryPreference.user_id == user.id
            ).delete(synchronize_session="fetch")
            db.add_all(
                UserCategoryPreference(user_id=user.id, category_id=cid, weight=1) for cid in wanted
            )
            db.flush()
            if commit:
                db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(f"Replaced category preferences for user {user.id}: {wanted}")
        return wanted


preference_service = PreferenceService()
