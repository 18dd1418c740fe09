"""
发票API（返回可打印的HTML）
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session
from app.core.security import get_current_user
from app.db.database import get_db
from app.models.customer import Customer
from app.models.user import User
from app.services import invoices, reports
from app.services.order_groups import (
    group_by_creator, group_by_creator_and_customer, group_by_customer, list_orders_with_details,
)

router = APIRouter(prefix="/api/invoices", tags=["Invoices"], dependencies=[Depends(get_current_user)])


def _ensure_user(db: Session, user_id: int) -> None:
    if not db.query(User.id).filter(User.id == user_id).first():
        raise HTTPException(status_code=404, detail="User not found")


def _ensure_customer(db: Session, customer_id: int) -> None:
    if not db.query(Customer.id).filter(Customer.id == customer_id).first():
        raise HTTPException(status_code=404, detail="Customer not found")


@router.get("/creators/{user_id}", response_class=HTMLResponse)
def get_creator_invoice(user_id: int, auto_print: bool = False, db: Session = Depends(get_db)):
    """某创建人的发票，按客户分段"""
    _ensure_user(db, user_id)
    groups = group_by_creator(list_orders_with_details(db, created_by=user_id))
    if not groups:
        raise HTTPException(status_code=404, detail="No orders found")
    return HTMLResponse(invoices.render_creator_invoice(groups[0], auto_print=auto_print))


@router.get("/customers/{customer_id}", response_class=HTMLResponse)
def get_customer_invoice(customer_id: int, auto_print: bool = False, db: Session = Depends(get_db)):
    """某客户的发票，按创建人分段"""
    _ensure_customer(db, customer_id)
    groups = group_by_customer(list_orders_with_details(db, customer_id=customer_id))
    if not groups:
        raise HTTPException(status_code=404, detail="No orders found")
    return HTMLResponse(invoices.render_customer_invoice(groups[0], auto_print=auto_print))


@router.get("/creators/{user_id}/customers/{customer_id}", response_class=HTMLResponse)
def get_creator_customer_invoice(user_id: int, customer_id: int, auto_print: bool = False, db: Session = Depends(get_db)):
    """某创建人给某客户下的订单"""
    _ensure_user(db, user_id)
    _ensure_customer(db, customer_id)
    groups = group_by_creator_and_customer(
        list_orders_with_details(db, customer_id=customer_id, created_by=user_id)
    )
    if not groups:
        raise HTTPException(status_code=404, detail="No orders found")
    return HTMLResponse(invoices.render_creator_customer_invoice(groups[0], auto_print=auto_print))


@router.get("/customers/{customer_id}/monthly-report", response_class=HTMLResponse)
def get_monthly_orders_report(customer_id: int, auto_print: bool = False, db: Session = Depends(get_db)):
    """客户近12个月订单报表"""
    report = reports.get_customer_monthly_orders(db, customer_id)
    return HTMLResponse(invoices.render_monthly_orders_report(report, auto_print=auto_print))
