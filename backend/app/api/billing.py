"""
账单管理API
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from app.core.security import get_current_user
from app.db.database import get_db
from app.models.user import User
from app.schemas.billing import (
    BillGenerationRequest, BillGenerationResponse, BillingCycleResponse,
    BillingSummary, PaymentCreate, PaymentResponse, PaymentResult,
)
from app.services import billing, reports

router = APIRouter(prefix="/api/billing", tags=["Billing"], dependencies=[Depends(get_current_user)])


@router.post("/generate", response_model=BillGenerationResponse)
def generate_bills(request: BillGenerationRequest, db: Session = Depends(get_db)):
    """生成或刷新某月所有客户的账单"""
    result = billing.generate_monthly_bills(db, request.billing_month, request.billing_year)
    return BillGenerationResponse(
        message=f"Generated bills for {result.processed} customers",
        billing_month=result.billing_month,
        billing_year=result.billing_year,
        created=result.created,
        updated=result.updated,
    )


@router.get("/cycles", response_model=List[BillingCycleResponse])
def get_billing_cycles(db: Session = Depends(get_db)):
    """所有账单"""
    return billing.list_billing_cycles(db)


@router.get("/cycles/current-month", response_model=List[BillingCycleResponse])
def get_current_month_bills(db: Session = Depends(get_db)):
    """本月账单"""
    return reports.get_current_month_bills(db)


@router.get("/cycles/{billing_cycle_id}", response_model=BillingCycleResponse)
def get_billing_cycle(billing_cycle_id: int, db: Session = Depends(get_db)):
    """账单详情"""
    return billing.get_billing_cycle(db, billing_cycle_id)


@router.get("/cycles/{billing_cycle_id}/payments", response_model=List[PaymentResponse])
def get_payments(billing_cycle_id: int, db: Session = Depends(get_db)):
    """账单的付款记录"""
    return billing.list_payments(db, billing_cycle_id)


@router.post("/cycles/{billing_cycle_id}/payments", response_model=PaymentResult)
def record_payment(
    billing_cycle_id: int,
    payment: PaymentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """登记付款"""
    recorded = billing.record_payment(
        db,
        billing_cycle_id,
        amount=payment.amount,
        payment_method=payment.payment_method,
        notes=payment.notes,
        created_by=current_user.id,
    )
    return PaymentResult(
        message="Payment recorded successfully",
        payment=PaymentResponse.model_validate(recorded.payment),
        billing_cycle=BillingCycleResponse.model_validate(recorded.billing_cycle),
    )


@router.get("/summary", response_model=BillingSummary)
def get_billing_summary(db: Session = Depends(get_db)):
    """账单汇总"""
    return reports.get_billing_summary(db)
