#!/usr/bin/env python3
"""
数据库初始化脚本

创建所有数据库表，并写入默认分类（已存在的分类会跳过）。
"""
import logging
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from app.crud.crud_category import category as crud_category, slugify
from app.db.base_class import Base
from app.db.database import SessionLocal, engine as default_engine
from app.schemas.category import CategoryCreate

# 导入所有模型，确保它们被正确注册
import app.models  # noqa: F401

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    "General",
    "Computer Science",
    "Mathematics",
    "Physics",
    "Chemistry",
    "Biology",
    "Engineering",
    "Pre-Med",
]


def seed_categories(db: Session) -> int:
    """插入缺失的默认分类，返回新插入的数量"""
    inserted = 0
    for name in DEFAULT_CATEGORIES:
        if crud_category.get_by_slug(db, slug=slugify(name)) is not None:
            continue
        crud_category.create(db, obj_in=CategoryCreate(name=name), commit=False)
        inserted += 1
    db.commit()
    return inserted


def init_db(engine: Optional[Engine] = None) -> None:
    """初始化数据库，创建所有表"""
    engine = engine or default_engine
    logger.info(f"Using database URL: {engine.url.render_as_string(hide_password=True)}")
    Base.metadata.create_all(bind=engine)

    db = SessionLocal(bind=engine)
    try:
        inserted = seed_categories(db)
    finally:
        db.close()
    logger.info(f"数据库表创建成功，新增默认分类 {inserted} 个")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
