"""
客户相关的Pydantic模型
"""
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from app.schemas.common import format_datetime_local


class ServicePriceItem(BaseModel):
    """客户专属价格项"""
    service_id: int = Field(..., description="服务ID")
    custom_price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, description="专属单价")


class CustomerBase(BaseModel):
    """客户基础模型"""
    name: str = Field(..., description="姓名", min_length=1, max_length=100)
    phone_number: str = Field(..., description="电话", min_length=1, max_length=20)
    address: Optional[str] = Field(None, description="地址", max_length=500)
    payment_due_date: Optional[int] = Field(None, ge=1, le=31, description="每月付款日(1-31)")


class CustomerCreate(CustomerBase):
    """创建客户模型"""
    service_prices: List[ServicePriceItem] = Field(default_factory=list, description="专属价格")


class CustomerUpdate(BaseModel):
    """更新客户模型，service_prices 不为空时整体替换专属价格"""
    name: Optional[str] = Field(None, description="姓名", min_length=1, max_length=100)
    phone_number: Optional[str] = Field(None, description="电话", min_length=1, max_length=20)
    address: Optional[str] = Field(None, description="地址", max_length=500)
    payment_due_date: Optional[int] = Field(None, ge=1, le=31, description="每月付款日(1-31)")
    service_prices: Optional[List[ServicePriceItem]] = Field(None, description="专属价格")


class CustomerResponse(CustomerBase):
    """客户响应模型"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: datetime

    @field_serializer('created_at', 'updated_at')
    def serialize_datetime(self, dt: datetime) -> Optional[str]:
        return format_datetime_local(dt)


class CustomerBrief(BaseModel):
    """嵌套在账单中的客户信息"""
    model_config = ConfigDict(from_attributes=True)

    name: str
    phone_number: str


class CustomerServicePriceResponse(BaseModel):
    """客户专属价格响应模型"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: int
    service_id: int
    custom_price: Decimal
