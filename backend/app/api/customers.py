"""
客户管理API
"""
import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import List, Optional
from app.core.security import get_current_user
from app.db.database import get_db
from app.models.customer import Customer
from app.models.customer_service_price import CustomerServicePrice
from app.models.party import Party
from app.models.service import Service
from app.schemas.billing import CustomerMonthlyOrders
from app.schemas.customer import (
    CustomerCreate, CustomerUpdate, CustomerResponse, CustomerServicePriceResponse, ServicePriceItem,
)
from app.schemas.order import OrderWithDetails
from app.schemas.party import PartyResponse
from app.services import reports
from app.services.order_groups import list_orders_with_details

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/customers", tags=["Customers"], dependencies=[Depends(get_current_user)])


def _get_customer_or_404(db: Session, customer_id: int) -> Customer:
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer


def _validate_service_prices(db: Session, items: List[ServicePriceItem]) -> None:
    """专属价格中的服务必须存在且不重复"""
    service_ids = [item.service_id for item in items]
    if len(service_ids) != len(set(service_ids)):
        raise HTTPException(status_code=400, detail="Duplicate service in custom prices")
    if not service_ids:
        return
    found = {row.id for row in db.query(Service.id).filter(Service.id.in_(service_ids)).all()}
    missing = sorted(set(service_ids) - found)
    if missing:
        raise HTTPException(status_code=404, detail=f"Service not found: {', '.join(str(i) for i in missing)}")


@router.get("", response_model=List[CustomerResponse])
def get_customers(
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """获取客户列表"""
    query = db.query(Customer)

    if search:
        query = query.filter(
            or_(
                Customer.name.like(f"%{search}%"),
                Customer.phone_number.like(f"%{search}%")
            )
        )

    return query.order_by(Customer.created_at, Customer.id).offset(skip).limit(limit).all()


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    """获取客户详情"""
    return _get_customer_or_404(db, customer_id)


@router.post("", response_model=CustomerResponse)
def create_customer(customer: CustomerCreate, db: Session = Depends(get_db)):
    """创建客户（可同时设置专属价格）"""
    _validate_service_prices(db, customer.service_prices)

    db_customer = Customer(
        name=customer.name,
        phone_number=customer.phone_number,
        address=customer.address,
        payment_due_date=customer.payment_due_date,
    )
    for item in customer.service_prices:
        db_customer.service_prices.append(
            CustomerServicePrice(service_id=item.service_id, custom_price=item.custom_price)
        )
    db.add(db_customer)
    db.commit()
    db.refresh(db_customer)
    logger.info("Created customer %s", db_customer.id)
    return db_customer


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: int,
    customer_update: CustomerUpdate,
    db: Session = Depends(get_db)
):
    """更新客户，传入 service_prices 时整体替换专属价格"""
    db_customer = _get_customer_or_404(db, customer_id)

    update_data = customer_update.model_dump(exclude_unset=True)
    service_prices = update_data.pop("service_prices", None)

    for field in ("name", "phone_number"):
        if field in update_data and update_data[field] is None:
            raise HTTPException(status_code=400, detail=f"{field} cannot be empty")

    for field, value in update_data.items():
        setattr(db_customer, field, value)

    if service_prices is not None:
        _validate_service_prices(db, customer_update.service_prices)
        db_customer.service_prices.clear()
        # 先删除旧记录再插入，避免唯一约束冲突
        db.flush()
        for item in customer_update.service_prices:
            db_customer.service_prices.append(
                CustomerServicePrice(service_id=item.service_id, custom_price=item.custom_price)
            )

    db.commit()
    db.refresh(db_customer)
    return db_customer


@router.delete("/{customer_id}")
def delete_customer(customer_id: int, db: Session = Depends(get_db)):
    """删除客户（连同专属价格、下属单位、订单、账单一起删除）"""
    db_customer = _get_customer_or_404(db, customer_id)
    try:
        db.delete(db_customer)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.exception("Error deleting customer %s", customer_id)
        raise HTTPException(status_code=500, detail="Failed to delete customer") from e
    logger.info("Deleted customer %s", customer_id)
    return {"success": True, "message": "Customer deleted"}


@router.get("/{customer_id}/service-prices", response_model=List[CustomerServicePriceResponse])
def get_customer_service_prices(customer_id: int, db: Session = Depends(get_db)):
    """客户专属价格"""
    _get_customer_or_404(db, customer_id)
    return db.query(CustomerServicePrice).filter(
        CustomerServicePrice.customer_id == customer_id
    ).order_by(CustomerServicePrice.service_id).all()


@router.get("/{customer_id}/parties", response_model=List[PartyResponse])
def get_customer_parties(customer_id: int, db: Session = Depends(get_db)):
    """客户的下属单位"""
    _get_customer_or_404(db, customer_id)
    return db.query(Party).filter(Party.customer_id == customer_id).order_by(Party.created_at, Party.id).all()


@router.get("/{customer_id}/orders", response_model=List[OrderWithDetails])
def get_customer_orders(customer_id: int, db: Session = Depends(get_db)):
    """客户订单明细"""
    _get_customer_or_404(db, customer_id)
    return list_orders_with_details(db, customer_id=customer_id, newest_first=True)


@router.get("/{customer_id}/monthly-orders", response_model=CustomerMonthlyOrders)
def get_customer_monthly_orders(customer_id: int, db: Session = Depends(get_db)):
    """客户近12个月订单统计"""
    return reports.get_customer_monthly_orders(db, customer_id)

