"""
用户模型
"""
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.database import Base, Timestamp

ROLE_ADMIN = "admin"
ROLE_USER = "user"


class User(Base):
    """用户表（管理员与员工）"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, comment="姓名")
    email = Column(String(255), nullable=False, unique=True, index=True, comment="邮箱")
    password_hash = Column(String(255), nullable=False, comment="密码哈希")
    role = Column(String(20), nullable=False, default=ROLE_USER, comment="角色：admin=管理员, user=员工")
    contact_number = Column(String(20), nullable=True, comment="联系电话")
    address = Column(String(500), nullable=True, comment="地址")
    banned = Column(Boolean, nullable=False, default=False, comment="是否禁用")
    created_at = Column(Timestamp, server_default=func.now(), nullable=False, comment="创建时间")
    updated_at = Column(Timestamp, server_default=func.now(), onupdate=func.now(), nullable=False, comment="更新时间")

    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


class UserSession(Base):
    """登录会话表"""
    __tablename__ = "user_sessions"

    id = Column(Integer, primary_key=True, index=True)
    token = Column(String(100), nullable=False, unique=True, comment="访问令牌")
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, comment="用户ID")
    expires_at = Column(Timestamp, nullable=False, comment="过期时间")
    ip_address = Column(String(50), comment="IP地址")
    user_agent = Column(String(500), comment="用户代理")
    created_at = Column(Timestamp, server_default=func.now(), nullable=False, comment="创建时间")

    user = relationship("User", back_populates="sessions")

    __table_args__ = (
        Index("idx_user_sessions_user_id", "user_id"),
    )
