"""
统计报表API（管理员）
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List
from app.core.security import require_admin
from app.db.database import get_db
from app.schemas.order import OrderWithDetails
from app.schemas.statistics import ChartDataPoint, DashboardStats
from app.services import reports
from app.services.order_groups import get_recent_orders

router = APIRouter(prefix="/api/statistics", tags=["Statistics"], dependencies=[Depends(require_admin)])


@router.get("/dashboard", response_model=DashboardStats)
def get_dashboard_stats(db: Session = Depends(get_db)):
    """仪表盘汇总"""
    return reports.get_dashboard_stats(db)


@router.get("/chart", response_model=List[ChartDataPoint])
def get_chart_data(
    days: int = Query(30, ge=1, le=366, description="统计最近N天"),
    db: Session = Depends(get_db)
):
    """按日营业额和订单数"""
    return reports.get_dashboard_chart_data(db, days=days)


@router.get("/recent-orders", response_model=List[OrderWithDetails])
def get_dashboard_recent_orders(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
):
    return get_recent_orders(db, limit=limit)
