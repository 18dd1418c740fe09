"""
日志配置
"""
import logging

from app.core.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = LOG_LEVEL) -> None:
    """初始化根日志记录器（重复调用无副作用）"""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # SQLAlchemy 的 SQL 日志由 DATABASE_ECHO 控制
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
