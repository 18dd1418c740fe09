"""
发票和报表HTML生成
生成的是可直接打印的独立HTML页面，不保存
"""
import os
from datetime import datetime
from decimal import Decimal
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.core.config import CURRENCY_CODE
from app.schemas.billing import CustomerMonthlyOrders
from app.schemas.order import CreatorCustomerOrderGroup, CreatorOrderGroup, CustomerOrderGroup
from app.services.order_groups import group_by_creator, group_by_customer
from app.services.pricing import ZERO, to_money

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "templates")

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}


def _group_digits_indian(whole: str) -> str:
    """印度计数法：最后三位一组，其余两位一组（1,23,45,678）"""
    if len(whole) <= 3:
        return whole
    head, tail = whole[:-3], whole[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_currency(amount, currency: str = CURRENCY_CODE) -> str:
    value = to_money(amount)
    sign = "-" if value < 0 else ""
    whole, frac = f"{abs(value):.2f}".split(".")
    if currency == "INR":
        whole = _group_digits_indian(whole)
    else:
        whole = f"{int(whole):,}"
    symbol = CURRENCY_SYMBOLS.get(currency, f"{currency} ")
    return f"{sign}{symbol}{whole}.{frac}"


def format_date(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.strftime("%d/%m/%Y")


def _build_env() -> Environment:
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["currency"] = format_currency
    env.filters["date"] = format_date
    return env


env = _build_env()


def document_number(prefix: str, now: Optional[datetime] = None) -> str:
    """编号：前缀 + 毫秒时间戳"""
    now = now or datetime.now()
    return f"{prefix}-{int(now.timestamp() * 1000)}"


def _render(template_name: str, now: Optional[datetime], auto_print: bool, **context) -> str:
    now = now or datetime.now()
    template = env.get_template(template_name)
    return template.render(current_date=format_date(now), auto_print=auto_print, **context)


def render_creator_invoice(group: CreatorOrderGroup, now: Optional[datetime] = None, auto_print: bool = False) -> str:
    """创建人发票，按客户分段"""
    return _render(
        "creator_invoice.html", now, auto_print,
        invoice_number=document_number("INV", now),
        group=group,
        sections=group_by_customer(group.orders),
    )


def render_customer_invoice(group: CustomerOrderGroup, now: Optional[datetime] = None, auto_print: bool = False) -> str:
    """客户发票，按创建人分段"""
    return _render(
        "customer_invoice.html", now, auto_print,
        invoice_number=document_number(f"INV-CUSTOMER-{group.customer_id}", now),
        group=group,
        sections=group_by_creator(group.orders),
    )


def render_creator_customer_invoice(group: CreatorCustomerOrderGroup, now: Optional[datetime] = None, auto_print: bool = False) -> str:
    return _render(
        "creator_customer_invoice.html", now, auto_print,
        invoice_number=document_number("INV", now),
        group=group,
    )


def render_monthly_orders_report(report: CustomerMonthlyOrders, now: Optional[datetime] = None, auto_print: bool = False) -> str:
    """客户近12个月订单报表"""
    total_orders = sum(month.order_count for month in report.monthly_totals)
    total_amount: Decimal = ZERO
    for month in report.monthly_totals:
        total_amount += month.total_amount
    return _render(
        "monthly_orders_report.html", now, auto_print,
        report_number=document_number("REPORT", now),
        report=report,
        total_orders=total_orders,
        total_amount=total_amount,
    )
