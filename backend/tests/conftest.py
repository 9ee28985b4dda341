# backend/tests/conftest.py
import os
import sys
from typing import Generator

import pytest

# 在导入项目模块前设置测试环境：内存数据库、同步执行 Celery 任务、低成本 bcrypt
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["SMTP_HOST"] = ""
os.environ["S3_BUCKET"] = "edutok-test"
os.environ["AWS_REGION"] = "us-east-1"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ.pop("COGNITO_USER_POOL_ID", None)
os.environ.pop("COGNITO_CLIENT_ID", None)

# 将 backend 目录添加到 sys.path 中
backend_path = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, backend_path)

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.db.base_class import Base
from app.db.database import SessionLocal, engine
from app.main import app


@pytest.fixture(autouse=True)
def _schema() -> Generator[None, None, None]:
    """每个测试使用全新的表结构"""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


