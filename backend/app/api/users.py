"""
用户（员工）管理API，仅管理员可用
"""
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import List, Optional
from app.core.errors import ConflictError, DuplicateError, UserNotFound
from app.core.security import get_password_hash, require_admin
from app.db.database import get_db
from app.models.order import Order
from app.models.payment import Payment
from app.models.user import User, UserSession
from app.schemas.user import UserBanUpdate, UserCreate, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"], dependencies=[Depends(require_admin)])


@router.get("", response_model=List[UserResponse])
def get_users(
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    role: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """获取用户列表"""
    query = db.query(User)

    if search:
        query = query.filter(
            or_(
                User.name.like(f"%{search}%"),
                User.email.like(f"%{search}%")
            )
        )
    if role:
        query = query.filter(User.role == role)

    return query.order_by(User.created_at, User.id).offset(skip).limit(limit).all()


@router.post("", response_model=UserResponse)
def create_user(user: UserCreate, db: Session = Depends(get_db)):
    """创建用户（员工或管理员）"""
    email = user.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise DuplicateError("Email already registered")

    db_user = User(
        name=user.name,
        email=email,
        password_hash=get_password_hash(user.password),
        role=user.role,
        contact_number=user.contact_number,
        address=user.address,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info("Created user %s with role %s", db_user.id, db_user.role)
    return db_user


def _get_other_user(db: Session, user_id: int, current_user: User, action: str) -> User:
    """管理员不能对自己执行 action"""
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail=f"You cannot {action} your own account")
    db_user = db.query(User).filter(User.id == user_id).first()
    if not db_user:
        raise UserNotFound()
    return db_user


@router.put("/{user_id}/ban", response_model=UserResponse)
def set_user_banned(
    user_id: int,
    ban: UserBanUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """禁用或启用用户，禁用时同时注销其所有会话"""
    db_user = _get_other_user(db, user_id, current_user, "ban")
    db_user.banned = ban.banned
    if ban.banned:
        db.query(UserSession).filter(UserSession.user_id == user_id).delete()
    db.commit()
    db.refresh(db_user)
    logger.info("User %s banned=%s", user_id, ban.banned)
    return db_user


@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin)
):
    """删除用户（已录入订单或付款的用户不能删除，只能禁用）"""
    db_user = _get_other_user(db, user_id, current_user, "delete")

    has_records = (
        db.query(Order.id).filter(Order.created_by == user_id).first() is not None
        or db.query(Payment.id).filter(Payment.created_by == user_id).first() is not None
    )
    if has_records:
        raise ConflictError("User has recorded orders or payments, ban the user instead")

    db.delete(db_user)
    db.commit()
    logger.info("Deleted user %s", user_id)
    return {"success": True, "message": "User deleted"}
