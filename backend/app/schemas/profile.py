from typing import List, Optional
from pydantic import Field

from app.schemas.user import UserSummary
from app.schemas.course import CourseOut
from app.schemas.video import VideoOut


class PublicProfile(UserSummary):
    """公开主页：基本信息、关注数、已发布课程和公开视频"""
    bio: Optional[str] = None
    follower_count: int = 0
    following_count: int = 0
    courses: List[CourseOut] = Field(default_factory=list)
    videos: List[VideoOut] = Field(default_factory=list)
