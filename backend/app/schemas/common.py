"""
Pydantic模型公共部分
"""
from datetime import datetime, timezone, timedelta
from typing import Optional

from app.core.config import DISPLAY_UTC_OFFSET_MINUTES

LOCAL_TZ = timezone(timedelta(minutes=DISPLAY_UTC_OFFSET_MINUTES))


def format_datetime_local(dt: Optional[datetime]) -> Optional[str]:
    """将UTC时间转换为本地时间字符串"""
    if dt is None:
        return None
    # 如果时间没有时区信息，假设它是 UTC
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(LOCAL_TZ).strftime("%Y-%m-%d %H:%M:%S")
