from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase, SortDirection
from app.models.user import User
from app.schemas.user import ProfileUpdate


class CRUDUser(CRUDBase[User, ProfileUpdate, ProfileUpdate]):
    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email.strip().lower()).first()

    def get_by_auth_sub(self, db: Session, *, auth_sub: str) -> Optional[User]:
        return db.query(User).filter(User.auth_sub == auth_sub).first()

    def search(self, db: Session, *, q: str, skip: int = 0, limit: int = 20) -> List[User]:
        """按名称、用户名或邮箱模糊搜索用户"""
        q = q.strip()
        if not q:
            return self.get_multi(db, skip=skip, limit=limit, sort_by=[("created_at", SortDirection.DESC)])
        pattern = f"%{q}%"
        return (
            db.query(User)
            .filter(or_(User.name.ilike(pattern), User.username.ilike(pattern), User.email.ilike(pattern)))
            .order_by(User.created_at.desc(), User.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )


# 实例化并暴露给 API 层使用
user = CRUDUser(User)
