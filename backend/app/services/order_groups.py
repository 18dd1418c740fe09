"""
订单明细与分组
分组函数都是纯函数，输入订单明细列表，输出按名称排序的分组
"""
import logging
from typing import Callable, Dict, Hashable, Iterable, List, Optional

from sqlalchemy.orm import Session, joinedload

from app.core.errors import CustomerNotFound, OrderValidationError, PartyNotFound, ServiceNotFound
from app.models.customer import Customer
from app.models.order import Order
from app.models.party import Party
from app.models.service import Service
from app.schemas.order import (
    CreatorCustomerOrderGroup, CreatorOrderGroup, CustomerOrderGroup, OrderItem, OrderWithDetails,
)
from app.services.pricing import ZERO, line_total, priced_orders, resolve_price, to_money

logger = logging.getLogger(__name__)

UNKNOWN_CUSTOMER = "Unknown Customer"
UNKNOWN_SERVICE = "Unknown Service"
UNKNOWN_USER = "Unknown User"


def _to_detail(row) -> OrderWithDetails:
    order, base_price, custom_price = row
    unit_price = resolve_price(base_price, custom_price)
    return OrderWithDetails(
        id=order.id,
        customer_id=order.customer_id,
        party_id=order.party_id,
        service_id=order.service_id,
        quantity=order.quantity,
        created_by=order.created_by,
        created_at=order.created_at,
        customer_name=order.customer.name if order.customer else UNKNOWN_CUSTOMER,
        party_name=order.party.name if order.party else None,
        service_name=order.service.name if order.service else UNKNOWN_SERVICE,
        creator_name=order.creator.name if order.creator else UNKNOWN_USER,
        unit_price=unit_price,
        line_total=line_total(unit_price, order.quantity),
    )


def list_orders_with_details(
    db: Session,
    customer_id: Optional[int] = None,
    created_by: Optional[int] = None,
    limit: Optional[int] = None,
    newest_first: bool = False
) -> List[OrderWithDetails]:
    """订单明细（带客户、单位、服务、创建人名称及实际单价）"""
    query = priced_orders(db).options(
        joinedload(Order.customer),
        joinedload(Order.party),
        joinedload(Order.service),
        joinedload(Order.creator),
    )
    if customer_id is not None:
        query = query.filter(Order.customer_id == customer_id)
    if created_by is not None:
        query = query.filter(Order.created_by == created_by)
    if newest_first:
        query = query.order_by(Order.created_at.desc(), Order.id.desc())
    else:
        query = query.order_by(Order.created_at, Order.id)
    if limit is not None:
        query = query.limit(limit)
    return [_to_detail(row) for row in query.all()]


def get_recent_orders(db: Session, limit: int = 10) -> List[OrderWithDetails]:
    return list_orders_with_details(db, limit=limit, newest_first=True)


def _group(orders: Iterable[OrderWithDetails], key: Callable[[OrderWithDetails], Hashable]) -> Dict[Hashable, List[OrderWithDetails]]:
    groups: Dict[Hashable, List[OrderWithDetails]] = {}
    for order in orders:
        groups.setdefault(key(order), []).append(order)
    return groups


def _total(orders: List[OrderWithDetails]):
    total = ZERO
    for order in orders:
        total += order.line_total
    return to_money(total)


def group_by_customer(orders: Iterable[OrderWithDetails]) -> List[CustomerOrderGroup]:
    groups = [
        CustomerOrderGroup(
            customer_id=customer_id,
            customer_name=members[0].customer_name,
            total_amount=_total(members),
            order_count=len(members),
            orders=members,
        )
        for customer_id, members in _group(orders, lambda o: o.customer_id).items()
    ]
    return sorted(groups, key=lambda g: (g.customer_name, g.customer_id))


def group_by_creator(orders: Iterable[OrderWithDetails]) -> List[CreatorOrderGroup]:
    groups = [
        CreatorOrderGroup(
            creator_id=creator_id,
            creator_name=members[0].creator_name,
            total_amount=_total(members),
            order_count=len(members),
            orders=members,
        )
        for creator_id, members in _group(orders, lambda o: o.created_by).items()
    ]
    return sorted(groups, key=lambda g: (g.creator_name, g.creator_id))


def group_by_creator_and_customer(orders: Iterable[OrderWithDetails]) -> List[CreatorCustomerOrderGroup]:
    groups = [
        CreatorCustomerOrderGroup(
            creator_id=creator_id,
            creator_name=members[0].creator_name,
            customer_id=customer_id,
            customer_name=members[0].customer_name,
            total_amount=_total(members),
            order_count=len(members),
            orders=members,
        )
        for (creator_id, customer_id), members in _group(orders, lambda o: (o.created_by, o.customer_id)).items()
    ]
    return sorted(groups, key=lambda g: (g.creator_name, g.customer_name, g.creator_id, g.customer_id))


def create_orders(
    db: Session,
    created_by: int,
    customer_id: int,
    items: List[OrderItem],
    party_id: Optional[int] = None
) -> List[Order]:
    """批量创建订单，每个明细一条订单，全部成功或全部失败"""
    if not items:
        raise OrderValidationError("At least one order item is required")

    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if not customer:
        raise CustomerNotFound()

    if party_id is not None:
        party = db.query(Party).filter(Party.id == party_id).first()
        if not party:
            raise PartyNotFound()
        if party.customer_id != customer_id:
            raise OrderValidationError("Party does not belong to this customer")

    service_ids = {item.service_id for item in items}
    found = {row.id for row in db.query(Service.id).filter(Service.id.in_(service_ids)).all()}
    missing = service_ids - found
    if missing:
        raise ServiceNotFound(f"Service not found: {', '.join(str(i) for i in sorted(missing))}")

    if any(item.quantity <= 0 for item in items):
        raise OrderValidationError("Quantity must be greater than 0")

    orders = []
    for item in items:
        order = Order(
            customer_id=customer_id,
            party_id=party_id,
            service_id=item.service_id,
            quantity=item.quantity,
            created_by=created_by,
        )
        db.add(order)
        orders.append(order)

    try:
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Error creating orders for customer %s", customer_id)
        raise
    for order in orders:
        db.refresh(order)
    logger.info("Created %d orders for customer %s by user %s", len(orders), customer_id, created_by)
    return orders
