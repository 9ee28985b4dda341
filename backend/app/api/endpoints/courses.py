from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.config.dependency_injection import get_current_user, get_db, get_optional_user
from app.crud.crud_course import course as crud_course
from app.models.user import User
from app.schemas.course import (
    ChapterCreate, ChapterOut, CourseCreate, CourseDetail, CourseOut, CourseUpdate, EnrollmentOut
)
from app.schemas.response import StandardResponse
from app.services.course_service import course_service

router = APIRouter()


@router.get("", response_model=StandardResponse[List[CourseOut]])
def list_courses(
        q: Optional[str] = Query(None, max_length=100),
        category_id: Optional[int] = None,
        skip: int = Query(0, ge=0),
        limit: int = Query(12, ge=1, le=100),
        db: Session = Depends(get_db)
):
    """
    浏览已发布课程，支持关键字和分类筛选
    """
    courses = crud_course.list_published(db, q=q, category_id=category_id, skip=skip, limit=limit)
    return StandardResponse(data=[CourseOut.model_validate(c) for c in courses])


@router.get("/mine", response_model=StandardResponse[List[CourseOut]])
def list_my_courses(
        skip: int = Query(0, ge=0),
        limit: int = Query(20, ge=1, le=100),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    courses = course_service.list_mine(db, current_user, skip=skip, limit=limit)
    return StandardResponse(data=[CourseOut.model_validate(c) for c in courses])


@router.get("/enrolled", response_model=StandardResponse[List[EnrollmentOut]])
def list_enrolled_courses(
        skip: int = Query(0, ge=0),
        limit: int = Query(20, ge=1, le=100),
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    当前用户报名的已发布课程
    """
    enrollments = course_service.list_enrolled(db, current_user, skip=skip, limit=limit)
    return StandardResponse(data=[EnrollmentOut.model_validate(e) for e in enrollments])


@router.post("", response_model=StandardResponse[CourseOut], status_code=status.HTTP_201_CREATED)
def create_course(
        payload: CourseCreate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    created = course_service.create(db, current_user, payload)
    return StandardResponse(code=status.HTTP_201_CREATED, data=CourseOut.model_validate(created))


@router.delete("/chapters/{chapter_id}", response_model=StandardResponse[None])
def delete_chapter(
        chapter_id: int,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    course_service.delete_chapter(db, chapter_id, current_user)
    return StandardResponse(message="Chapter deleted")


@router.get("/{course_id}", response_model=StandardResponse[CourseDetail])
def read_course(
        course_id: int,
        viewer: Optional[User] = Depends(get_optional_user),
        db: Session = Depends(get_db)
):
    course = course_service.get_visible(db, course_id, viewer)
    detail = CourseDetail.model_validate(course)
    detail.enrollment_count = course_service.enrollment_count(db, course.id)
    return StandardResponse(data=detail)


@router.patch("/{course_id}", response_model=StandardResponse[CourseOut])
def update_course(
        course_id: int,
        payload: CourseUpdate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    updated = course_service.update(db, course_id, current_user, payload)
    return StandardResponse(data=CourseOut.model_validate(updated))


@router.delete("/{course_id}", response_model=StandardResponse[None])
def delete_course(
        course_id: int,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    course_service.delete(db, course_id, current_user)
    return StandardResponse(message="Course deleted")


@router.post("/{course_id}/chapters", response_model=StandardResponse[ChapterOut], status_code=status.HTTP_201_CREATED)
def add_chapter(
        course_id: int,
        payload: ChapterCreate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    chapter = course_service.add_chapter(db, course_id, current_user, payload)
    return StandardResponse(code=status.HTTP_201_CREATED, data=ChapterOut.model_validate(chapter))


@router.post("/{course_id}/enroll", response_model=StandardResponse[EnrollmentOut])
def enroll_course(
        course_id: int,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    报名课程，重复报名返回已有记录
    """
    entry = course_service.enroll(db, course_id, current_user)
    return StandardResponse(message="Enrolled", data=EnrollmentOut.model_validate(entry))
