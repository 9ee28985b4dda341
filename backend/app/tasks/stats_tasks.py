import logging

from app.celery_app import celery_app
from app.db.database import SessionLocal
from app.services.quiz_service import quiz_service

logger = logging.getLogger(__name__)


@celery_app.task(name='app.tasks.stats_tasks.rebuild_quiz_stats_task')
def rebuild_quiz_stats_task(user_id: int, course_id: int) -> dict:
    """根据作答记录重新计算 (用户, 课程) 的测验统计，用于对账"""
    db = SessionLocal()
    try:
        stats = quiz_service.rebuild_stats(db, user_id=user_id, course_id=course_id)
        logger.info(f"Stats Task: rebuilt quiz stats for user {user_id}, course {course_id}")
        if stats is None:
            return {"user_id": user_id, "course_id": course_id, "total_attempts": 0, "avg_score": 0.0}
        return {
            "user_id": user_id,
            "course_id": course_id,
            "total_attempts": stats.total_attempts,
            "avg_score": stats.avg_score,
        }
    finally:
        db.close()
