from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.video import MAX_VIDEO_DURATION_SECONDS
from app.schemas.quiz import QuestionCreate


class VideoCreate(BaseModel):
    """创建视频，可同时内联创建测验题目

    Attributes:
        storage_key: 通过预签名上传得到的对象存储 key
        duration_seconds: 视频时长，1-90秒
        quiz: 内联测验题目，为空则不创建测验
    """
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    storage_key: str = Field(..., min_length=1, max_length=1024)
    duration_seconds: int = Field(..., ge=1, le=MAX_VIDEO_DURATION_SECONDS)
    category_id: Optional[int] = None
    course_id: Optional[int] = None
    chapter_id: Optional[int] = None
    quiz: List[QuestionCreate] = Field(default_factory=list)


class VideoUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: Optional[int] = None

    @field_validator("title")
    @classmethod
    def reject_null_title(cls, value):
        if value is None:
            raise ValueError("must not be null")
        return value


class VideoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    storage_key: str
    duration_seconds: int
    creator_id: int
    category_id: Optional[int] = None
    course_id: Optional[int] = None
    chapter_id: Optional[int] = None
    views_count: int
    likes_count: int
    comments_count: int
    created_at: Optional[datetime] = None


class CommentCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=1000)

    @field_validator("text")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Comment text must not be blank")
        return value


class CommentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    video_id: int
    text: str
    created_at: datetime


class StreamUrlOut(BaseModel):
    url: str
    key: str
    bucket: str
    expires_in: int
