from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class CourseCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    cover_image_url: Optional[str] = Field(None, max_length=500)
    category_id: Optional[int] = None
    published: bool = False


class CourseUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    cover_image_url: Optional[str] = Field(None, max_length=500)
    category_id: Optional[int] = None
    published: Optional[bool] = None

    @field_validator("title", "published")
    @classmethod
    def reject_null(cls, value):
        # 省略表示不修改；显式 null 不能写入非空列
        if value is None:
            raise ValueError("must not be null")
        return value


class ChapterCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    order: int = Field(..., ge=1)


class ChapterOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    order: int
    course_id: int


class CourseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    cover_image_url: Optional[str] = None
    category_id: Optional[int] = None
    creator_id: int
    published: bool
    created_at: Optional[datetime] = None


class CourseDetail(CourseOut):
    chapters: List[ChapterOut] = Field(default_factory=list)
    enrollment_count: int = 0


class EnrollmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    course_id: int
    created_at: Optional[datetime] = None
    course: CourseOut
