"""
用户相关的Pydantic模型
"""
from pydantic import BaseModel, ConfigDict, Field, EmailStr, field_serializer
from typing import Literal, Optional
from datetime import datetime
from app.schemas.common import format_datetime_local


class UserBase(BaseModel):
    """用户基础模型"""
    name: str = Field(..., description="姓名", min_length=1, max_length=100)
    email: EmailStr = Field(..., description="邮箱")
    role: Literal["admin", "user"] = Field("user", description="角色：admin=管理员, user=员工")
    contact_number: Optional[str] = Field(None, description="联系电话", max_length=20)
    address: Optional[str] = Field(None, description="地址", max_length=500)


class UserCreate(UserBase):
    """创建用户模型"""
    password: str = Field(..., description="密码", min_length=8, max_length=128)


class UserResponse(UserBase):
    """用户响应模型"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    banned: bool = False
    created_at: datetime
    updated_at: datetime

    @field_serializer('created_at', 'updated_at')
    def serialize_datetime(self, dt: datetime) -> Optional[str]:
        return format_datetime_local(dt)


class UserBanUpdate(BaseModel):
    """禁用/启用用户"""
    banned: bool = Field(..., description="是否禁用")
