from typing import List, Optional
from pydantic import BaseModel
from sqlalchemy import or_
from sqlalchemy.orm import Session
from app.crud.base import CRUDBase, SortDirection
from app.models.course import Course, Chapter, CourseEnrollment
from app.schemas.course import CourseCreate, CourseUpdate, ChapterCreate


class CRUDCourse(CRUDBase[Course, CourseCreate, CourseUpdate]):
    def list_published(
        self,
        db: Session,
        *,
        q: Optional[str] = None,
        category_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 12
    ) -> List[Course]:
        """
        查询已发布课程，支持标题/描述关键字与分类筛选，按创建时间倒序。
        """
        query = db.query(Course).filter(Course.published.is_(True))
        if category_id is not None:
            query = query.filter(Course.category_id == category_id)
        if q and q.strip():
            pattern = f"%{q.strip()}%"
            query = query.filter(or_(Course.title.ilike(pattern), Course.description.ilike(pattern)))
        return query.order_by(Course.created_at.desc(), Course.id.desc()).offset(skip).limit(limit).all()

    def list_by_creator(
        self, db: Session, *, creator_id: int, published_only: bool = False, skip: int = 0, limit: int = 20
    ) -> List[Course]:
        filters = {"creator_id": creator_id}
        if published_only:
            filters["published"] = True
        return self.get_multi(
            db,
            skip=skip,
            limit=limit,
            filter_conditions=filters,
            sort_by=[("created_at", SortDirection.DESC), ("id", SortDirection.DESC)]
        )


class CRUDChapter(CRUDBase[Chapter, ChapterCreate, ChapterCreate]):
    pass


class CRUDEnrollment(CRUDBase[CourseEnrollment, BaseModel, BaseModel]):
    def get_by_user_and_course(self, db: Session, *, user_id: int, course_id: int) -> Optional[CourseEnrollment]:
        return (
            db.query(CourseEnrollment)
            .filter(CourseEnrollment.user_id == user_id, CourseEnrollment.course_id == course_id)
            .first()
        )

    def list_by_user(self, db: Session, *, user_id: int, skip: int = 0, limit: int = 20) -> List[CourseEnrollment]:
        """
        用户已报名的课程，最近报名的在前；课程被撤回为草稿后不再列出。
        """
        return (
            db.query(CourseEnrollment)
            .join(Course, CourseEnrollment.course_id == Course.id)
            .filter(CourseEnrollment.user_id == user_id, Course.published.is_(True))
            .order_by(CourseEnrollment.created_at.desc(), CourseEnrollment.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_for_course(self, db: Session, *, course_id: int) -> int:
        return self.get_count(db, filter_conditions={"course_id": course_id})


course = CRUDCourse(Course)
chapter = CRUDChapter(Chapter)
enrollment = CRUDEnrollment(CourseEnrollment)
