from datetime import datetime, UTC

from sqlalchemy.orm import declarative_base

# 所有ORM模型共享的声明基类
Base = declarative_base()


def utcnow() -> datetime:
    """返回不带时区信息的UTC时间（SQLite 不保存时区）"""
    return datetime.now(UTC).replace(tzinfo=None)
