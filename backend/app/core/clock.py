"""
时间工具
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    """当前UTC时间（不带时区信息，与数据库中存储的时间一致）"""
    return datetime.now(timezone.utc).replace(tzinfo=None)
