from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app.core.config import settings


def _engine_kwargs(url: str) -> dict:
    kwargs = {}
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        # connect_args 是SQLite特有的，用于允许多线程访问
        kwargs["connect_args"] = {"check_same_thread": False}
        if parsed.database in (None, "", ":memory:"):
            # 内存数据库必须复用同一个连接，否则每个会话看到的都是空库
            kwargs["poolclass"] = StaticPool
    return kwargs


# 创建数据库引擎
engine = create_engine(settings.DATABASE_URL, **_engine_kwargs(settings.DATABASE_URL))


if engine.dialect.name == "sqlite":
    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# 创建一个Session工厂
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# FastAPI 依赖项，用于在每个请求中获取数据库会话
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
