"""
账单和付款相关的Pydantic模型
"""
from pydantic import BaseModel, ConfigDict, Field, field_serializer
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from app.schemas.common import format_datetime_local
from app.schemas.customer import CustomerBrief


class BillGenerationRequest(BaseModel):
    """生成月度账单请求"""
    billing_month: int = Field(..., ge=1, le=12, description="账单月份(1-12)")
    billing_year: int = Field(..., ge=2000, le=9999, description="账单年份")


class BillGenerationResponse(BaseModel):
    """生成月度账单结果"""
    success: bool = True
    message: str
    billing_month: int
    billing_year: int
    created: int = Field(..., description="新建账单数")
    updated: int = Field(..., description="刷新账单数")


class BillingCycleResponse(BaseModel):
    """月度账单响应模型"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_id: int
    billing_month: int
    billing_year: int
    total_amount: Decimal
    previous_carryover: Decimal
    paid_amount: Decimal
    remaining_balance: Decimal
    is_closed: bool
    customer: Optional[CustomerBrief] = None
    created_at: datetime
    updated_at: datetime

    @field_serializer('created_at', 'updated_at')
    def serialize_datetime(self, dt: datetime) -> Optional[str]:
        return format_datetime_local(dt)


class PaymentCreate(BaseModel):
    """登记付款模型"""
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2, description="付款金额")
    payment_method: str = Field("cash", min_length=1, max_length=50, description="付款方式")
    notes: Optional[str] = Field(None, description="备注")


class UserBrief(BaseModel):
    """嵌套的用户信息"""
    model_config = ConfigDict(from_attributes=True)

    name: str


class PaymentResponse(BaseModel):
    """付款记录响应模型"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    billing_cycle_id: int
    amount: Decimal
    payment_date: datetime
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    created_by: int
    creator: Optional[UserBrief] = None
    created_at: datetime

    @field_serializer('payment_date', 'created_at')
    def serialize_datetime(self, dt: datetime) -> Optional[str]:
        return format_datetime_local(dt)


class PaymentResult(BaseModel):
    """登记付款结果"""
    success: bool = True
    message: str
    payment: PaymentResponse
    billing_cycle: BillingCycleResponse


class BillingSummary(BaseModel):
    """账单汇总"""
    total_outstanding: Decimal = Field(..., description="未收总额")
    total_paid: Decimal = Field(..., description="已收总额")
    total_billed: Decimal = Field(..., description="应收总额")
    overdue_count: int = Field(..., description="逾期账单数")


class MonthlyOrderTotal(BaseModel):
    """客户某月订单合计"""
    year: int
    month: int
    month_name: str = Field(..., description="例如 March 2025")
    total_amount: Decimal
    order_count: int


class CustomerMonthlyOrders(BaseModel):
    """客户近12个月订单报表"""
    customer_id: int
    customer_name: str
    monthly_totals: List[MonthlyOrderTotal] = Field(default_factory=list)
