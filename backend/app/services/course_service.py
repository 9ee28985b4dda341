import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError
from app.core.permissions import ensure_creator, ensure_owner
from app.crud.crud_category import category as crud_category
from app.crud.crud_course import course as crud_course, chapter as crud_chapter, enrollment as crud_enrollment
from app.models.course import Chapter, Course, CourseEnrollment
from app.models.user import User
from app.schemas.course import ChapterCreate, CourseCreate, CourseUpdate

logger = logging.getLogger(__name__)


class CourseService:
    """课程与章节的创作和浏览，所有修改操作都按所有者校验"""

    def get_visible(self, db: Session, course_id: int, viewer: Optional[User]) -> Course:
        """未发布课程只对所有者和管理员可见，其他人视为不存在"""
        course = crud_course.get(db, course_id)
        if course is None:
            raise NotFoundError("Course not found")
        if not course.published and (viewer is None or (viewer.id != course.creator_id and not viewer.is_admin)):
            raise NotFoundError("Course not found")
        return course

    def get_owned(self, db: Session, course_id: int, actor: User) -> Course:
        course = crud_course.get(db, course_id)
        if course is None:
            raise NotFoundError("Course not found")
        ensure_owner(course.creator_id, actor, "Not your course")
        return course

    def create(self, db: Session, actor: User, payload: CourseCreate) -> Course:
        ensure_creator(actor)
        self._check_category(db, payload.category_id)
        course = crud_course.create(db, obj_in=payload, creator_id=actor.id)
        logger.info(f"User {actor.id} created course {course.id}")
        return course

    def update(self, db: Session, course_id: int, actor: User, payload: CourseUpdate) -> Course:
        course = self.get_owned(db, course_id, actor)
        if "category_id" in payload.model_fields_set:
            self._check_category(db, payload.category_id)
        return crud_course.update(db, db_obj=course, obj_in=payload)

    def delete(self, db: Session, course_id: int, actor: User) -> None:
        """删除课程：级联章节、测验、统计和报名记录，视频只解除关联"""
        self.get_owned(db, course_id, actor)
        crud_course.remove(db, obj_id=course_id)
        logger.info(f"User {actor.id} deleted course {course_id}")

    def list_mine(self, db: Session, actor: User, *, skip: int = 0, limit: int = 20) -> List[Course]:
        return crud_course.list_by_creator(db, creator_id=actor.id, skip=skip, limit=limit)

    # ===== Chapters =====

    def add_chapter(self, db: Session, course_id: int, actor: User, payload: ChapterCreate) -> Chapter:
        self.get_owned(db, course_id, actor)
        try:
            chapter = crud_chapter.create(db, obj_in=payload, course_id=course_id)
        except IntegrityError as e:
            db.rollback()
            raise ConflictError(f"Chapter order {payload.order} already used in this course") from e
        return chapter

    def delete_chapter(self, db: Session, chapter_id: int, actor: User) -> None:
        chapter = crud_chapter.get(db, chapter_id)
        if chapter is None:
            raise NotFoundError("Chapter not found")
        ensure_owner(chapter.course.creator_id, actor, "Not your course")
        crud_chapter.remove(db, obj_id=chapter_id)

    # ===== Enrollment =====

    def enroll(self, db: Session, course_id: int, actor: User) -> CourseEnrollment:
        """
        报名课程。重复报名是幂等的，直接返回已有记录。

        Raises:
            NotFoundError: 课程不存在或对当前用户不可见
        """
        course = self.get_visible(db, course_id, actor)
        existing = crud_enrollment.get_by_user_and_course(db, user_id=actor.id, course_id=course.id)
        if existing is not None:
            return existing
        entry = CourseEnrollment(user_id=actor.id, course_id=course.id)
        db.add(entry)
        try:
            db.commit()
        except IntegrityError:
            # 并发报名时另一请求已写入
            db.rollback()
            return crud_enrollment.get_by_user_and_course(db, user_id=actor.id, course_id=course.id)
        db.refresh(entry)
        logger.info(f"User {actor.id} enrolled in course {course.id}")
        return entry

    def list_enrolled(self, db: Session, actor: User, *, skip: int = 0, limit: int = 20) -> List[CourseEnrollment]:
        return crud_enrollment.list_by_user(db, user_id=actor.id, skip=skip, limit=limit)

    def enrollment_count(self, db: Session, course_id: int) -> int:
        return crud_enrollment.count_for_course(db, course_id=course_id)

    @staticmethod
    def _check_category(db: Session, category_id: Optional[int]) -> None:
        if category_id is not None and crud_category.get(db, category_id) is None:
            raise NotFoundError("Category not found")


course_service = CourseService()
