from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from app.config.dependency_injection import get_current_user, get_db
from app.models.user import User
from app.schemas.quiz import AttemptCreate, AttemptOut, QuizCreate, QuizPublic, QuizStatsOut
from app.schemas.response import StandardResponse
from app.services.quiz_service import quiz_service

router = APIRouter()


@router.post("", response_model=StandardResponse[QuizPublic], status_code=status.HTTP_201_CREATED)
def create_quiz(
        payload: QuizCreate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    quiz = quiz_service.create(db, current_user, payload)
    return StandardResponse(code=status.HTTP_201_CREATED, data=QuizPublic.model_validate(quiz))


@router.get("/stats/me", response_model=StandardResponse[List[QuizStatsOut]])
def my_stats(
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    当前用户按课程汇总的测验统计
    """
    stats = quiz_service.list_stats(db, current_user)
    return StandardResponse(data=[QuizStatsOut.model_validate(s) for s in stats])


@router.get("/{quiz_id}", response_model=StandardResponse[QuizPublic])
def read_quiz(
        quiz_id: int,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    quiz = quiz_service.get(db, quiz_id)
    return StandardResponse(data=QuizPublic.model_validate(quiz))


@router.post("/{quiz_id}/attempts", response_model=StandardResponse[AttemptOut], status_code=status.HTTP_201_CREATED)
def submit_attempt(
        quiz_id: int,
        payload: AttemptCreate,
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    提交测验结果，每个用户每个测验只能提交一次
    """
    attempt = quiz_service.record_attempt(db, current_user, quiz_id, payload)
    return StandardResponse(code=status.HTTP_201_CREATED, data=AttemptOut.model_validate(attempt))
