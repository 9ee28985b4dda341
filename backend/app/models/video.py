import enum
from sqlalchemy import (Column, Integer, String, Text, DateTime, Boolean, Enum, ForeignKey,
                        UniqueConstraint, CheckConstraint)
from sqlalchemy.orm import relationship
from app.db.base_class import Base, utcnow

MAX_VIDEO_DURATION_SECONDS = 90


class Video(Base):
    """短视频模型

    时长上限 90 秒；views/likes/comments 计数为冗余字段，由对应写操作顺带维护。
    删除为软删除（is_deleted）。
    """
    __tablename__ = "videos"
    __table_args__ = (
        CheckConstraint(f"duration_seconds >= 1 AND duration_seconds <= {MAX_VIDEO_DURATION_SECONDS}",
                        name="ck_video_duration"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    storage_key = Column(String(1024), nullable=False)
    duration_seconds = Column(Integer, nullable=False)
    creator_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), index=True, nullable=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="SET NULL"), nullable=True)
    chapter_id = Column(Integer, ForeignKey("chapters.id", ondelete="SET NULL"), nullable=True)
    views_count = Column(Integer, nullable=False, default=0)
    likes_count = Column(Integer, nullable=False, default=0)
    comments_count = Column(Integer, nullable=False, default=0)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow, index=True)

    creator = relationship("User")
    course = relationship("Course", back_populates="videos")
    chapter = relationship("Chapter", back_populates="videos")
    quiz = relationship("Quiz", back_populates="video", uselist=False)


class WatchedVideo(Base):
    """观看记录，(user_id, video_id) 唯一，重复标记为幂等操作"""
    __tablename__ = "watched_videos"
    __table_args__ = (
        UniqueConstraint("user_id", "video_id", name="uq_watched_video"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    video_id = Column(Integer, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=utcnow)


class SavedKind(str, enum.Enum):
    SAVED = "saved"
    FAVORITE = "favorite"


class SavedVideo(Base):
    """用户收藏/喜欢的视频列表"""
    __tablename__ = "saved_videos"
    __table_args__ = (
        UniqueConstraint("user_id", "video_id", "kind", name="uq_saved_video"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    video_id = Column(Integer, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)
    kind = Column(Enum(SavedKind, values_callable=lambda e: [m.value for m in e]), nullable=False)
    created_at = Column(DateTime, default=utcnow)


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    video_id = Column(Integer, ForeignKey("videos.id", ondelete="CASCADE"), index=True, nullable=False)
    text = Column(String(1000), nullable=False)
    created_at = Column(DateTime, default=utcnow)

    author = relationship("User")
