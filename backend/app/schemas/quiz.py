from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class AnswerCreate(BaseModel):
    text: str = Field(..., min_length=1)
    is_correct: bool = False


class QuestionCreate(BaseModel):
    """题目创建模型，至少两个选项且至少一个正确选项"""
    text: str = Field(..., min_length=1)
    answers: List[AnswerCreate] = Field(..., min_length=2)

    @model_validator(mode="after")
    def check_has_correct_answer(self):
        if not any(a.is_correct for a in self.answers):
            raise ValueError("Each question needs at least one correct answer")
        return self


class QuizCreate(BaseModel):
    """独立创建测验（挂到章节或课程上，也可以补挂到视频上）

    video_id / chapter_id / course_id 最多只能设置一个。
    """
    title: Optional[str] = Field(None, max_length=255)
    video_id: Optional[int] = None
    chapter_id: Optional[int] = None
    course_id: Optional[int] = None
    questions: List[QuestionCreate] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_single_attachment(self):
        attached = [x for x in (self.video_id, self.chapter_id, self.course_id) if x is not None]
        if len(attached) > 1:
            raise ValueError("A quiz can be attached to at most one of video, chapter or course")
        return self


class AnswerPublic(BaseModel):
    """不包含 is_correct，避免泄露答案"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    text: str


class QuestionPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order: int
    text: str
    answers: List[AnswerPublic]


class QuizPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: Optional[str] = None
    creator_id: int
    video_id: Optional[int] = None
    chapter_id: Optional[int] = None
    course_id: Optional[int] = None
    questions: List[QuestionPublic]


class AnswerSelection(BaseModel):
    question_id: int
    answer_id: int


class AttemptCreate(BaseModel):
    """提交测验结果：直接给出分数，或提交选项由服务端评分（二选一）"""
    score: Optional[int] = Field(None, ge=0, le=100)
    answers: Optional[List[AnswerSelection]] = None

    @model_validator(mode="after")
    def check_exactly_one(self):
        if (self.score is None) == (self.answers is None):
            raise ValueError("Provide either score or answers")
        return self


class AttemptOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    quiz_id: int
    score: int
    created_at: datetime


class QuizStatsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    course_id: int
    total_attempts: int
    avg_score: float
