"""
下属单位相关的Pydantic模型
"""
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from typing import Optional
from datetime import datetime
from app.schemas.common import format_datetime_local


class PartyCreate(BaseModel):
    """创建下属单位模型"""
    name: str = Field(..., description="名称", min_length=1, max_length=100)
    customer_id: int = Field(..., description="客户ID")


class PartyResponse(PartyCreate):
    """下属单位响应模型"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: datetime

    @field_serializer('created_at', 'updated_at')
    def serialize_datetime(self, dt: datetime) -> Optional[str]:
        return format_datetime_local(dt)
