"""
认证相关API
"""
import logging
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
from app.core.config import ALLOW_SIGNUP
from app.core.errors import DuplicateError
from app.core.security import (
    bearer_scheme, create_session, get_current_user, get_password_hash, verify_password,
)
from app.db.database import get_db
from app.models.user import User, UserSession, ROLE_ADMIN, ROLE_USER
from app.schemas.auth import SignInRequest, SignUpRequest, SessionResponse
from app.schemas.user import UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/sign-up", response_model=SessionResponse)
def sign_up(request: SignUpRequest, http_request: Request, db: Session = Depends(get_db)):
    """
    注册
    系统中还没有任何用户时，第一个注册的用户成为管理员
    """
    is_first_user = db.query(User.id).first() is None
    if not ALLOW_SIGNUP and not is_first_user:
        raise HTTPException(status_code=403, detail="Sign up is disabled, ask an admin to create your account")

    email = request.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise DuplicateError("Email already registered")

    user = User(
        name=request.name,
        email=email,
        password_hash=get_password_hash(request.password),
        role=ROLE_ADMIN if is_first_user else ROLE_USER,
        contact_number=request.contact_number,
        address=request.address,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("User %s signed up as %s", user.id, user.role)

    session = create_session(db, user, http_request)
    return SessionResponse(access_token=session.token, user=UserResponse.model_validate(user))


@router.post("/sign-in", response_model=SessionResponse)
def sign_in(request: SignInRequest, http_request: Request, db: Session = Depends(get_db)):
    """登录"""
    user = db.query(User).filter(User.email == request.email.lower()).first()
    if not user or not verify_password(request.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if user.banned:
        raise HTTPException(status_code=403, detail="User is banned")

    session = create_session(db, user, http_request)
    return SessionResponse(access_token=session.token, user=UserResponse.model_validate(user))


@router.post("/sign-out")
def sign_out(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
):
    """退出登录（删除当前会话）"""
    if credentials and credentials.credentials:
        db.query(UserSession).filter(UserSession.token == credentials.credentials).delete()
        db.commit()
    return {"message": "Signed out"}


@router.get("/session", response_model=UserResponse)
def get_session(current_user: User = Depends(get_current_user)):
    """当前登录用户"""
    return current_user
