"""
测试数据构造工具

直接通过 ORM 写入数据，绕过注册和验证码流程。
"""
from sqlalchemy.orm import Session

from app.config.dependency_injection import get_token_codec
from app.core.config import settings
from app.core.security import hash_password
from app.crud.crud_category import category as crud_category
from app.models.course import Chapter, Course
from app.models.user import User, UserRole
from app.models.video import Video
from app.schemas.category import CategoryCreate

API = settings.API_V1_STR
DEFAULT_PASSWORD = "password123"


def make_user(
        db: Session,
        email: str,
        *,
        name: str = "Test User",
        role: UserRole = UserRole.LEARNER,
        verified: bool = True,
        password: str = DEFAULT_PASSWORD,
        username: str = None,
) -> User:
    user = User(
        name=name,
        email=email,
        username=username,
        password_hash=hash_password(password, rounds=4),
        role=role,
        is_verified=verified,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    token = get_token_codec().issue(user_id=user.id, role=user.role.value, is_admin=user.is_admin)
    return {"Authorization": f"Bearer {token}"}


def make_category(db: Session, name: str):
    return crud_category.create(db, obj_in=CategoryCreate(name=name))


def make_course(db: Session, creator: User, *, title: str = "Course", published: bool = True, category_id=None) -> Course:
    course = Course(title=title, creator_id=creator.id, published=published, category_id=category_id)
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


def make_chapter(db: Session, course: Course, *, order: int = 1, title: str = "Chapter") -> Chapter:
    chapter = Chapter(title=title, order=order, course_id=course.id)
    db.add(chapter)
    db.commit()
    db.refresh(chapter)
    return chapter


def make_video(db: Session, creator: User, *, title: str = "Clip", category_id=None, course_id=None, duration: int = 30) -> Video:
    video = Video(
        title=title,
        storage_key=f"video/2024/01/01/{title}.mp4",
        duration_seconds=duration,
        creator_id=creator.id,
        category_id=category_id,
        course_id=course_id,
    )
    db.add(video)
    db.commit()
    db.refresh(video)
    return video
