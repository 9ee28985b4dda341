import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import BadRequestError, ConflictError, NotFoundError
from app.core.permissions import ensure_owner
from app.models.course import Chapter, Course
from app.models.quiz import Answer, Question, Quiz, QuizAttempt, UserQuizStats
from app.models.user import User
from app.models.video import Video
from app.schemas.quiz import AnswerSelection, AttemptCreate, QuestionCreate, QuizCreate

logger = logging.getLogger(__name__)


def build_questions(quiz: Quiz, questions: List[QuestionCreate]) -> None:
    """按提交顺序为测验追加题目和选项（order 从1开始）"""
    for index, q in enumerate(questions, start=1):
        question = Question(order=index, text=q.text)
        question.answers = [Answer(text=a.text, is_correct=a.is_correct) for a in q.answers]
        quiz.questions.append(question)


class QuizService:
    """
    测验创建与作答记录。

    作答记录与 (用户, 课程) 统计在同一事务中写入；统计按增量方式维护平均分，
    rebuild_stats 可根据作答记录整体重算。
    """

    def get(self, db: Session, quiz_id: int) -> Quiz:
        quiz = db.get(Quiz, quiz_id)
        if quiz is None or (quiz.video is not None and quiz.video.is_deleted):
            raise NotFoundError("Quiz not found")
        return quiz

    def create(self, db: Session, actor: User, payload: QuizCreate) -> Quiz:
        quiz = Quiz(title=payload.title, creator_id=actor.id)
        if payload.video_id is not None:
            video = db.get(Video, payload.video_id)
            if video is None or video.is_deleted:
                raise NotFoundError("Video not found")
            ensure_owner(video.creator_id, actor, "Not your video")
            if video.quiz is not None:
                raise ConflictError("Video already has a quiz")
            quiz.video_id = video.id
        elif payload.chapter_id is not None:
            chapter = db.get(Chapter, payload.chapter_id)
            if chapter is None:
                raise NotFoundError("Chapter not found")
            ensure_owner(chapter.course.creator_id, actor, "Not your course")
            quiz.chapter_id = chapter.id
        elif payload.course_id is not None:
            course = db.get(Course, payload.course_id)
            if course is None:
                raise NotFoundError("Course not found")
            ensure_owner(course.creator_id, actor, "Not your course")
            quiz.course_id = course.id

        build_questions(quiz, payload.questions)
        db.add(quiz)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise ConflictError("Video already has a quiz") from e
        db.refresh(quiz)
        return quiz

    def record_attempt(self, db: Session, actor: User, quiz_id: int, payload: AttemptCreate) -> QuizAttempt:
        """
        记录一次作答。同一用户对同一测验只能作答一次，第二次返回冲突。

        Raises:
            NotFoundError: 测验不存在
            BadRequestError: 提交的选项不属于该测验
            ConflictError: 已经作答过
        """
        quiz = self.get(db, quiz_id)
        if self._get_attempt(db, actor.id, quiz.id) is not None:
            raise ConflictError("Quiz already attempted")

        score = payload.score if payload.answers is None else self.grade(quiz, payload.answers)
        attempt = QuizAttempt(user_id=actor.id, quiz_id=quiz.id, score=score)
        db.add(attempt)
        try:
            db.flush()
            course_id = self.course_id_for(quiz)
            if course_id is not None:
                self._apply_to_stats(db, actor.id, course_id, score)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise ConflictError("Quiz already attempted") from e
        db.refresh(attempt)
        logger.info(f"User {actor.id} attempted quiz {quiz.id} with score {score}")
        return attempt

    @staticmethod
    def grade(quiz: Quiz, selections: List[AnswerSelection]) -> int:
        """按题目数计算百分制得分，未作答的题目计0分"""
        if not quiz.questions:
            raise BadRequestError("Quiz has no questions")
        questions = {q.id: q for q in quiz.questions}
        chosen = {}
        for selection in selections:
            question = questions.get(selection.question_id)
            if question is None:
                raise BadRequestError(f"Question {selection.question_id} is not part of this quiz")
            answer = next((a for a in question.answers if a.id == selection.answer_id), None)
            if answer is None:
                raise BadRequestError(f"Answer {selection.answer_id} does not belong to question {question.id}")
            chosen[question.id] = answer.is_correct
        correct = sum(1 for ok in chosen.values() if ok)
        return round(100 * correct / len(questions))

    @staticmethod
    def course_id_for(quiz: Quiz) -> Optional[int]:
        """测验所属课程：直接挂课程，或经由章节/视频关联到课程"""
        if quiz.course_id is not None:
            return quiz.course_id
        if quiz.chapter is not None:
            return quiz.chapter.course_id
        if quiz.video is not None:
            return quiz.video.course_id
        return None

    def list_stats(self, db: Session, user: User) -> List[UserQuizStats]:
        return (
            db.query(UserQuizStats)
            .filter(UserQuizStats.user_id == user.id)
            .order_by(UserQuizStats.course_id.asc())
            .all()
        )

    def rebuild_stats(self, db: Session, *, user_id: int, course_id: int) -> Optional[UserQuizStats]:
        """根据该课程下所有测验的作答记录重新计算统计"""
        attempts = [
            a for a in db.query(QuizAttempt).filter(QuizAttempt.user_id == user_id).all()
            if self.course_id_for(db.get(Quiz, a.quiz_id)) == course_id
        ]
        stats = self._get_stats(db, user_id, course_id)
        if not attempts:
            if stats is not None:
                db.delete(stats)
                db.commit()
            return None
        if stats is None:
            stats = UserQuizStats(user_id=user_id, course_id=course_id)
            db.add(stats)
        stats.total_attempts = len(attempts)
        stats.avg_score = sum(a.score for a in attempts) / len(attempts)
        db.commit()
        db.refresh(stats)
        return stats

    def _apply_to_stats(self, db: Session, user_id: int, course_id: int, score: int) -> None:
        stats = self._get_stats(db, user_id, course_id)
        if stats is None:
            stats = UserQuizStats(user_id=user_id, course_id=course_id, total_attempts=0, avg_score=0.0)
            db.add(stats)
        total = stats.total_attempts or 0
        stats.avg_score = ((stats.avg_score or 0.0) * total + score) / (total + 1)
        stats.total_attempts = total + 1
        db.flush()

    @staticmethod
    def _get_stats(db: Session, user_id: int, course_id: int) -> Optional[UserQuizStats]:
        return (
            db.query(UserQuizStats)
            .filter(UserQuizStats.user_id == user_id, UserQuizStats.course_id == course_id)
            .first()
        )

    @staticmethod
    def _get_attempt(db: Session, user_id: int, quiz_id: int) -> Optional[QuizAttempt]:
        return (
            db.query(QuizAttempt)
            .filter(QuizAttempt.user_id == user_id, QuizAttempt.quiz_id == quiz_id)
            .first()
        )


quiz_service = QuizService()
