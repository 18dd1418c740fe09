"""
认证工具：密码哈希、登录会话、当前用户依赖
"""
import secrets
from datetime import timedelta
from typing import Optional

import bcrypt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.core.config import SESSION_TTL_HOURS
from app.core.errors import AuthenticationError, PermissionDeniedError
from app.db.database import get_db
from app.models.user import User, UserSession

bearer_scheme = HTTPBearer(auto_error=False)


def get_password_hash(password: str) -> str:
    """生成密码哈希"""
    # bcrypt限制密码长度不能超过72字节，需要截断
    password_bytes = password.encode("utf-8")[:72]
    return bcrypt.hashpw(password_bytes, bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """验证密码"""
    return bcrypt.checkpw(plain_password.encode("utf-8")[:72], hashed_password.encode("utf-8"))


def create_session(db: Session, user: User, request: Optional[Request] = None) -> UserSession:
    """为用户创建登录会话并提交"""
    session = UserSession(
        token=secrets.token_urlsafe(32),
        user_id=user.id,
        expires_at=utcnow() + timedelta(hours=SESSION_TTL_HOURS),
    )
    if request is not None:
        session.ip_address = request.client.host if request.client else None
        session.user_agent = (request.headers.get("user-agent") or "")[:500] or None
    db.add(session)
    db.commit()
    db.refresh(session)
    return session


def find_session_user(db: Session, token: str) -> Optional[User]:
    """根据令牌查找未过期会话对应的用户"""
    session = db.query(UserSession).filter(
        UserSession.token == token,
        UserSession.expires_at > utcnow()
    ).first()
    if not session:
        return None
    return session.user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """当前登录用户，未登录或令牌失效时返回401"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()
    user = find_session_user(db, credentials.credentials)
    if user is None:
        raise AuthenticationError("Invalid or expired session")
    if user.banned:
        raise PermissionDeniedError("User is banned")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    """只允许管理员"""
    if not user.is_admin:
        raise PermissionDeniedError()
    return user
