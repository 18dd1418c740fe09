"""
统计报表相关的Pydantic模型
"""
from pydantic import BaseModel, Field
import datetime
from decimal import Decimal


class DashboardStats(BaseModel):
    """仪表盘汇总"""
    total_revenue: Decimal = Field(..., description="总营业额")
    total_orders: int = Field(..., description="订单数")
    total_customers: int = Field(..., description="下过单的客户数")
    average_order_value: Decimal = Field(..., description="平均订单金额")


class ChartDataPoint(BaseModel):
    """按日统计点"""
    date: datetime.date
    revenue: Decimal = Field(..., description="当日营业额")
    orders: int = Field(..., description="当日订单数")
