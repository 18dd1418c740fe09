"""
应用配置
所有配置项都从环境变量读取，未设置时使用默认值
"""
import os


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


APP_NAME = os.getenv("APP_NAME", "Operations Console API")
APP_VERSION = "1.0.0"
APP_DEBUG = _get_bool("APP_DEBUG", False)

# 数据库连接，默认使用本地SQLite
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./database.db")
DATABASE_ECHO = _get_bool("DATABASE_ECHO", False)

# 登录令牌有效期（小时）
SESSION_TTL_HOURS = _get_int("SESSION_TTL_HOURS", 24 * 7)

# 账单创建超过多少天仍有余额视为逾期
OVERDUE_AFTER_DAYS = _get_int("OVERDUE_AFTER_DAYS", 30)

# 发票货币
CURRENCY_CODE = os.getenv("CURRENCY_CODE", "INR")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# 逗号分隔的允许来源
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

# 返回给前端的时间按此时区显示（分钟偏移，默认UTC+5:30）
DISPLAY_UTC_OFFSET_MINUTES = _get_int("DISPLAY_UTC_OFFSET_MINUTES", 330)

# 是否允许自助注册（系统中还没有用户时总是允许，第一个用户为管理员）
ALLOW_SIGNUP = _get_bool("ALLOW_SIGNUP", True)
