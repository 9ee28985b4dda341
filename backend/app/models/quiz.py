from sqlalchemy import (Column, Integer, String, Text, DateTime, Boolean, Float, ForeignKey,
                        UniqueConstraint, CheckConstraint)
from sqlalchemy.orm import relationship
from app.db.base_class import Base, utcnow


class Quiz(Base):
    """测验模型

    最多挂载到 video / chapter / course 三者之一；每个视频最多一个测验。
    删除测验时级联删除题目、选项和作答记录。
    """
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=True)
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    video_id = Column(Integer, ForeignKey("videos.id"), unique=True, nullable=True)
    chapter_id = Column(Integer, ForeignKey("chapters.id", ondelete="CASCADE"), nullable=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    video = relationship("Video", back_populates="quiz")
    chapter = relationship("Chapter", back_populates="quizzes")
    course = relationship("Course", back_populates="quizzes")
    questions = relationship("Question", back_populates="quiz",
                             cascade="all, delete-orphan", order_by="Question.order")
    attempts = relationship("QuizAttempt", cascade="all, delete-orphan")


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), index=True, nullable=False)
    order = Column(Integer, nullable=False, default=1)
    text = Column(Text, nullable=False)

    quiz = relationship("Quiz", back_populates="questions")
    answers = relationship("Answer", back_populates="question",
                           cascade="all, delete-orphan", order_by="Answer.id")


class Answer(Base):
    __tablename__ = "answers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), index=True, nullable=False)
    text = Column(Text, nullable=False)
    is_correct = Column(Boolean, nullable=False, default=False)

    question = relationship("Question", back_populates="answers")


class QuizAttempt(Base):
    """测验作答记录，每个用户每个测验只记录一次"""
    __tablename__ = "quiz_attempts"
    __table_args__ = (
        UniqueConstraint("user_id", "quiz_id", name="uq_attempt_user_quiz"),
        CheckConstraint("score >= 0 AND score <= 100", name="ck_attempt_score"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), index=True, nullable=False)
    score = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=utcnow)


class UserQuizStats(Base):
    """按 (用户, 课程) 预先汇总的作答次数与平均分"""
    __tablename__ = "user_quiz_stats"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_stats_user_course"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    total_attempts = Column(Integer, nullable=False, default=0)
    avg_score = Column(Float, nullable=False, default=0.0)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
