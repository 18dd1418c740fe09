"""
服务项目相关的Pydantic模型
"""
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from typing import Optional
from datetime import datetime
from decimal import Decimal
from app.schemas.common import format_datetime_local


class ServiceCreate(BaseModel):
    """创建服务模型"""
    name: str = Field(..., description="服务名称", min_length=1, max_length=100)
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, description="基础单价")


class ServiceResponse(ServiceCreate):
    """服务响应模型"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: datetime

    @field_serializer('created_at', 'updated_at')
    def serialize_datetime(self, dt: datetime) -> Optional[str]:
        return format_datetime_local(dt)
