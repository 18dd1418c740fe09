"""
订单管理API
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from app.core.security import get_current_user
from app.db.database import get_db
from app.models.user import User
from app.schemas.order import (
    OrderCreate, OrderResponse, OrderWithDetails,
    CustomerOrderGroup, CreatorOrderGroup, CreatorCustomerOrderGroup,
)
from app.services import order_groups

router = APIRouter(prefix="/api/orders", tags=["Orders"], dependencies=[Depends(get_current_user)])


@router.post("", response_model=List[OrderResponse])
def create_orders(
    order: OrderCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """批量创建订单，创建人为当前登录用户"""
    return order_groups.create_orders(
        db,
        created_by=current_user.id,
        customer_id=order.customer_id,
        items=order.order_items,
        party_id=order.party_id,
    )


@router.get("", response_model=List[OrderWithDetails])
def get_orders(
    customer_id: Optional[int] = None,
    created_by: Optional[int] = None,
    db: Session = Depends(get_db)
):
    """订单明细列表"""
    return order_groups.list_orders_with_details(db, customer_id=customer_id, created_by=created_by)


@router.get("/recent", response_model=List[OrderWithDetails])
def get_recent_orders(
    limit: int = Query(10, ge=1, le=100, description="返回条数"),
    db: Session = Depends(get_db)
):
    """最近订单"""
    return order_groups.get_recent_orders(db, limit=limit)


@router.get("/grouped/by-customer", response_model=List[CustomerOrderGroup])
def get_orders_by_customer(db: Session = Depends(get_db)):
    """按客户分组"""
    return order_groups.group_by_customer(order_groups.list_orders_with_details(db))


@router.get("/grouped/by-creator", response_model=List[CreatorOrderGroup])
def get_orders_by_creator(db: Session = Depends(get_db)):
    """按创建人分组"""
    return order_groups.group_by_creator(order_groups.list_orders_with_details(db))


@router.get("/grouped/by-creator-and-customer", response_model=List[CreatorCustomerOrderGroup])
def get_orders_by_creator_and_customer(db: Session = Depends(get_db)):
    """按创建人+客户分组"""
    return order_groups.group_by_creator_and_customer(order_groups.list_orders_with_details(db))
