"""
数据库配置和连接
"""
from sqlalchemy import DateTime, create_engine, event
from sqlalchemy.dialects import sqlite
from sqlalchemy.orm import declarative_base, sessionmaker

from app.core.config import DATABASE_URL, DATABASE_ECHO


def _engine_kwargs(url: str) -> dict:
    if url.startswith("sqlite"):
        # SQLite需要这个参数
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


# 创建数据库引擎
engine = create_engine(DATABASE_URL, echo=DATABASE_ECHO, **_engine_kwargs(DATABASE_URL))


@event.listens_for(engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite默认不检查外键，级联删除依赖它"""
    if DATABASE_URL.startswith("sqlite"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# 创建会话工厂
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# 创建基础模型类
Base = declarative_base()

# 时间列类型：SQLite 按字符串比较时间，格式与 CURRENT_TIMESTAMP 一致（不带微秒）
Timestamp = DateTime(timezone=True).with_variant(sqlite.DATETIME(truncate_microseconds=True), "sqlite")


def get_db():
    """获取数据库会话"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
