"""
订单相关的Pydantic模型
"""
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from app.schemas.common import format_datetime_local


class OrderItem(BaseModel):
    """订单明细项"""
    service_id: int = Field(..., description="服务ID")
    quantity: int = Field(..., gt=0, description="数量")


class OrderCreate(BaseModel):
    """批量创建订单模型（一个服务一条订单）"""
    customer_id: int = Field(..., description="客户ID")
    party_id: Optional[int] = Field(None, description="下属单位ID")
    order_items: List[OrderItem] = Field(..., min_length=1, description="订单明细")


class OrderResponse(BaseModel):
    """订单响应模型"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: int
    party_id: Optional[int] = None
    service_id: int
    quantity: int
    created_by: int
    created_at: datetime

    @field_serializer('created_at')
    def serialize_datetime(self, dt: datetime) -> Optional[str]:
        return format_datetime_local(dt)


class OrderWithDetails(OrderResponse):
    """带名称和价格的订单"""
    customer_name: str
    party_name: Optional[str] = None
    service_name: str
    creator_name: str
    unit_price: Decimal = Field(..., description="实际单价（专属价优先）")
    line_total: Decimal = Field(..., description="小计")


class CustomerOrderGroup(BaseModel):
    """按客户分组"""
    customer_id: int
    customer_name: str
    total_amount: Decimal
    order_count: int
    orders: List[OrderWithDetails] = Field(default_factory=list)


class CreatorOrderGroup(BaseModel):
    """按创建人分组"""
    creator_id: int
    creator_name: str
    total_amount: Decimal
    order_count: int
    orders: List[OrderWithDetails] = Field(default_factory=list)


class CreatorCustomerOrderGroup(BaseModel):
    """按创建人+客户分组"""
    creator_id: int
    creator_name: str
    customer_id: int
    customer_name: str
    total_amount: Decimal
    order_count: int
    orders: List[OrderWithDetails] = Field(default_factory=list)
