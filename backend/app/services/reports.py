"""
账单汇总与经营报表（只读）
"""
import calendar
from collections import OrderedDict
from datetime import date, datetime, timedelta
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, contains_eager

from app.core.clock import utcnow
from app.core.config import OVERDUE_AFTER_DAYS
from app.core.errors import CustomerNotFound
from app.models.billing_cycle import BillingCycle
from app.models.customer import Customer
from app.models.order import Order
from app.schemas.billing import BillingSummary, CustomerMonthlyOrders, MonthlyOrderTotal
from app.schemas.statistics import ChartDataPoint, DashboardStats
from app.services.pricing import ZERO, priced_orders, row_line_total, to_money


def get_billing_summary(db: Session, now: Optional[datetime] = None, overdue_after_days: int = OVERDUE_AFTER_DAYS) -> BillingSummary:
    """
    所有账单的未收、已收、应收合计
    逾期：仍有余额且账单创建超过 overdue_after_days 天
    """
    now = now or utcnow()
    total_outstanding = ZERO
    total_paid = ZERO
    total_billed = ZERO
    for remaining, paid, total in db.query(
        BillingCycle.remaining_balance, BillingCycle.paid_amount, BillingCycle.total_amount
    ).all():
        total_outstanding += to_money(remaining)
        total_paid += to_money(paid)
        total_billed += to_money(total)

    threshold = now - timedelta(days=overdue_after_days)
    overdue_count = db.query(func.count(BillingCycle.id)).filter(
        BillingCycle.remaining_balance > 0,
        BillingCycle.created_at <= threshold
    ).scalar() or 0

    return BillingSummary(
        total_outstanding=total_outstanding,
        total_paid=total_paid,
        total_billed=total_billed,
        overdue_count=overdue_count,
    )


def get_current_month_bills(db: Session, now: Optional[datetime] = None) -> List[BillingCycle]:
    """本月账单，按客户姓名排序"""
    now = now or utcnow()
    return db.query(BillingCycle).join(Customer, BillingCycle.customer_id == Customer.id).options(
        contains_eager(BillingCycle.customer)
    ).filter(
        BillingCycle.billing_month == now.month,
        BillingCycle.billing_year == now.year
    ).order_by(Customer.name, BillingCycle.id).all()


def _one_year_before(moment: datetime) -> datetime:
    try:
        return moment.replace(year=moment.year - 1)
    except ValueError:
        # 2月29日
        return moment.replace(year=moment.year - 1, day=28)


def get_customer_monthly_orders(db: Session, customer_id: int, now: Optional[datetime] = None) -> CustomerMonthlyOrders:
    """客户近12个月每月的订单金额和订单数"""
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if not customer:
        raise CustomerNotFound()

    since = _one_year_before(now or utcnow())
    rows = priced_orders(db).filter(
        Order.customer_id == customer_id,
        Order.created_at >= since
    ).order_by(Order.created_at).all()

    buckets = OrderedDict()
    for row in rows:
        created_at = row[0].created_at
        key = (created_at.year, created_at.month)
        if key not in buckets:
            buckets[key] = {"total": ZERO, "count": 0}
        buckets[key]["total"] += row_line_total(row)
        buckets[key]["count"] += 1

    monthly_totals = [
        MonthlyOrderTotal(
            year=year,
            month=month,
            month_name=f"{calendar.month_name[month]} {year}",
            total_amount=to_money(bucket["total"]),
            order_count=bucket["count"],
        )
        for (year, month), bucket in sorted(buckets.items())
    ]
    return CustomerMonthlyOrders(
        customer_id=customer.id,
        customer_name=customer.name,
        monthly_totals=monthly_totals,
    )


def get_dashboard_stats(db: Session) -> DashboardStats:
    """营业额、订单数、客户数、平均订单金额"""
    total_revenue = ZERO
    total_orders = 0
    customer_ids = set()
    for row in priced_orders(db).all():
        total_revenue += row_line_total(row)
        total_orders += 1
        customer_ids.add(row[0].customer_id)

    average = to_money(total_revenue / total_orders) if total_orders else ZERO
    return DashboardStats(
        total_revenue=to_money(total_revenue),
        total_orders=total_orders,
        total_customers=len(customer_ids),
        average_order_value=average,
    )


def get_dashboard_chart_data(db: Session, days: int = 30, now: Optional[datetime] = None) -> List[ChartDataPoint]:
    """最近 days 天按日统计的营业额和订单数（只包含有订单的日期）"""
    since = (now or utcnow()) - timedelta(days=days)
    rows = priced_orders(db).filter(Order.created_at >= since).order_by(Order.created_at).all()

    buckets = {}
    for row in rows:
        day: date = row[0].created_at.date()
        revenue, count = buckets.get(day, (ZERO, 0))
        buckets[day] = (revenue + row_line_total(row), count + 1)

    return [
        ChartDataPoint(date=day, revenue=to_money(revenue), orders=count)
        for day, (revenue, count) in sorted(buckets.items())
    ]
