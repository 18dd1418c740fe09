"""
认证相关的Pydantic模型
"""
from pydantic import BaseModel, Field, EmailStr
from typing import Optional
from app.schemas.user import UserResponse


class SignUpRequest(BaseModel):
    """注册请求"""
    name: str = Field(..., description="姓名", min_length=1, max_length=100)
    email: EmailStr = Field(..., description="邮箱")
    password: str = Field(..., description="密码", min_length=8, max_length=128)
    contact_number: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=500)


class SignInRequest(BaseModel):
    """登录请求"""
    email: EmailStr = Field(..., description="邮箱")
    password: str = Field(..., description="密码")


class SessionResponse(BaseModel):
    """登录响应"""
    access_token: str = Field(..., description="访问令牌")
    token_type: str = "bearer"
    user: UserResponse
