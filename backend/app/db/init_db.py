"""
数据库初始化脚本
用法: python -m app.db.init_db [--admin-email EMAIL --admin-password PASSWORD]
"""
import argparse
import logging

from app.core.logging import setup_logging
from app.core.security import get_password_hash
from app.db.database import Base, SessionLocal, engine
from app.models import User
from app.models.user import ROLE_ADMIN

logger = logging.getLogger(__name__)


def init_db(bind=engine):
    """初始化数据库，创建所有表"""
    Base.metadata.create_all(bind=bind)
    logger.info("Database tables created")


def create_admin(db, name: str, email: str, password: str) -> User:
    """创建管理员（邮箱已存在时直接返回已有用户）"""
    user = db.query(User).filter(User.email == email).first()
    if user:
        logger.info("User %s already exists", email)
        return user
    user = User(name=name, email=email, password_hash=get_password_hash(password), role=ROLE_ADMIN)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created admin user %s", email)
    return user


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create database tables and an optional admin user")
    parser.add_argument("--admin-name", default="Admin")
    parser.add_argument("--admin-email")
    parser.add_argument("--admin-password")
    args = parser.parse_args(argv)

    setup_logging()
    init_db()
    if args.admin_email:
        if not args.admin_password:
            parser.error("--admin-password is required with --admin-email")
        db = SessionLocal()
        try:
            create_admin(db, args.admin_name, args.admin_email, args.admin_password)
        finally:
            db.close()


if __name__ == "__main__":
    main()
