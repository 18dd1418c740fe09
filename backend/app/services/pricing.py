"""
价格计算
实际单价 = 客户专属价（如有）否则服务基础单价，所有金额统一为两位小数的 Decimal
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Optional

from sqlalchemy import and_
from sqlalchemy.orm import Session

from app.core.errors import ServiceNotFound
from app.models.customer_service_price import CustomerServicePrice
from app.models.order import Order
from app.models.service import Service

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """转换为两位小数的 Decimal（四舍五入）"""
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        # 先转字符串，避免浮点数的二进制误差被带入
        try:
            value = Decimal(str(value))
        except InvalidOperation:
            raise ValueError(f"Invalid amount: {value!r}")
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def resolve_price(base_price, custom_price=None) -> Decimal:
    """专属价优先"""
    return to_money(custom_price if custom_price is not None else base_price)


def line_total(unit_price, quantity: int) -> Decimal:
    return to_money(to_money(unit_price) * quantity)


def effective_price(db: Session, customer_id: int, service_id: int) -> Decimal:
    """查询某客户某服务的实际单价"""
    service = db.query(Service).filter(Service.id == service_id).first()
    if not service:
        raise ServiceNotFound()
    override = db.query(CustomerServicePrice).filter(
        CustomerServicePrice.customer_id == customer_id,
        CustomerServicePrice.service_id == service_id
    ).first()
    return resolve_price(service.price, override.custom_price if override else None)


def priced_orders(db: Session):
    """
    订单查询，每行为 (Order, base_price, custom_price)
    调用方可以继续追加 filter / order_by
    """
    return (
        db.query(
            Order,
            Service.price.label("base_price"),
            CustomerServicePrice.custom_price.label("custom_price"),
        )
        .join(Service, Order.service_id == Service.id)
        .outerjoin(
            CustomerServicePrice,
            and_(
                CustomerServicePrice.customer_id == Order.customer_id,
                CustomerServicePrice.service_id == Order.service_id,
            ),
        )
    )


def row_line_total(row) -> Decimal:
    """priced_orders 查询结果行的小计"""
    order, base_price, custom_price = row
    return line_total(resolve_price(base_price, custom_price), order.quantity)


def sum_line_totals(rows: Iterable) -> Decimal:
    total = ZERO
    for row in rows:
        total += row_line_total(row)
    return to_money(total)


def max_zero(value: Decimal) -> Decimal:
    return value if value > ZERO else ZERO


def parse_amount(value) -> Optional[Decimal]:
    """解析外部传入的金额，无法解析时返回 None"""
    try:
        return to_money(value)
    except (ValueError, TypeError):
        return None
