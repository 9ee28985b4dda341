from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from app.db.base_class import Base, utcnow


class Course(Base):
    """课程模型

    删除课程时级联删除章节、挂在课程或章节上的测验、该课程的测验统计和报名记录；
    引用该课程的视频保留，只解除关联。
    """
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    cover_image_url = Column(String(500), nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    creator_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    published = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    creator = relationship("User")
    chapters = relationship("Chapter", back_populates="course",
                            cascade="all, delete-orphan", order_by="Chapter.order")
    quizzes = relationship("Quiz", back_populates="course", cascade="all, delete-orphan")
    videos = relationship("Video", back_populates="course")
    quiz_stats = relationship("UserQuizStats", cascade="all, delete-orphan")
    enrollments = relationship("CourseEnrollment", back_populates="course", cascade="all, delete-orphan")


class Chapter(Base):
    """课程章节，order 在同一课程内唯一"""
    __tablename__ = "chapters"
    __table_args__ = (
        UniqueConstraint("course_id", "order", name="uq_chapter_order"),
        CheckConstraint('"order" >= 1', name="ck_chapter_order_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    order = Column(Integer, nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), index=True, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    course = relationship("Course", back_populates="chapters")
    quizzes = relationship("Quiz", back_populates="chapter", cascade="all, delete-orphan")
    videos = relationship("Video", back_populates="chapter")


class CourseEnrollment(Base):
    """学习者报名课程，每个用户对同一课程只有一条记录"""
    __tablename__ = "course_enrollments"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_enrollment_user_course"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), index=True, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    course = relationship("Course", back_populates="enrollments")
