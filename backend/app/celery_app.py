import logging
from celery import Celery
from app.core.config import settings

# 配置日志记录器
logger = logging.getLogger(__name__)

# 创建 Celery 应用实例
celery_app = Celery(
    "edutok",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=[
        "app.tasks.mail_tasks",
        "app.tasks.stats_tasks",
    ]
)

# Celery 配置
celery_app.conf.update(
    # 任务序列化格式
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",

    timezone="UTC",
    enable_utc=True,

    # 测试和本地开发时在当前进程内同步执行任务
    task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,
    task_eager_propagates=True,

    # 队列配置
    task_routes={
        'app.tasks.mail_tasks.send_email_task': {'queue': 'mail_queue'},
        'app.tasks.stats_tasks.rebuild_quiz_stats_task': {'queue': 'stats_queue'},
    },
    task_default_queue='default',
)
