"""
账单引擎

月度账单：
    本期应收 = 本月订单合计（专属价优先）+ 上期结转
    上期结转 = 上月账单的剩余未付（没有上月账单则为0）
    剩余未付 = max(0, 本期应收 - 累计已付)，剩余未付为0时账单结清

重复生成同一个月的账单时，会按当前订单数据重新计算应收和结转，但不会清空已付金额。
付款登记和账单刷新都在同一个事务中完成，账单行通过 version 字段做乐观锁。
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.orm.exc import StaleDataError

from app.core.errors import (
    AppError, BillingCycleNotFound, ConcurrentUpdateError, InvalidBillingPeriod,
    PaymentValidationError,
)
from app.models.billing_cycle import BillingCycle
from app.models.customer import Customer
from app.models.order import Order
from app.models.payment import Payment
from app.services.pricing import ZERO, max_zero, parse_amount, priced_orders, sum_line_totals, to_money

logger = logging.getLogger(__name__)


@dataclass
class BillGenerationResult:
    billing_month: int
    billing_year: int
    created: int = 0
    updated: int = 0

    @property
    def processed(self) -> int:
        return self.created + self.updated


@dataclass
class RecordedPayment:
    payment: Payment
    billing_cycle: BillingCycle


def validate_period(billing_month: int, billing_year: int) -> None:
    if isinstance(billing_month, bool) or not isinstance(billing_month, int) or not 1 <= billing_month <= 12:
        raise InvalidBillingPeriod(f"Billing month must be between 1 and 12, got {billing_month!r}")
    if isinstance(billing_year, bool) or not isinstance(billing_year, int) or not 1 <= billing_year <= 9998:
        raise InvalidBillingPeriod(f"Invalid billing year {billing_year!r}")


def month_bounds(billing_month: int, billing_year: int) -> Tuple[datetime, datetime]:
    """账单月份的时间范围 [月初, 下月初)"""
    validate_period(billing_month, billing_year)
    start = datetime(billing_year, billing_month, 1)
    if billing_month == 12:
        end = datetime(billing_year + 1, 1, 1)
    else:
        end = datetime(billing_year, billing_month + 1, 1)
    return start, end


def previous_period(billing_month: int, billing_year: int) -> Tuple[int, int]:
    """上一个账单月份，1月的上一期是去年12月"""
    if billing_month == 1:
        return 12, billing_year - 1
    return billing_month - 1, billing_year


def monthly_order_total(db: Session, customer_id: int, billing_month: int, billing_year: int) -> Decimal:
    """客户某月订单合计"""
    start, end = month_bounds(billing_month, billing_year)
    rows = priced_orders(db).filter(
        Order.customer_id == customer_id,
        Order.created_at >= start,
        Order.created_at < end
    ).all()
    return sum_line_totals(rows)


def find_cycle(db: Session, customer_id: int, billing_month: int, billing_year: int) -> Optional[BillingCycle]:
    return db.query(BillingCycle).filter(
        BillingCycle.customer_id == customer_id,
        BillingCycle.billing_month == billing_month,
        BillingCycle.billing_year == billing_year
    ).first()


def apply_balance(cycle: BillingCycle, total_amount: Decimal, paid_amount: Decimal) -> None:
    """根据应收和已付重新计算剩余未付和结清状态"""
    remaining = max_zero(to_money(total_amount - paid_amount))
    cycle.total_amount = to_money(total_amount)
    cycle.paid_amount = to_money(paid_amount)
    cycle.remaining_balance = remaining
    cycle.is_closed = remaining <= ZERO


def refresh_customer_cycle(db: Session, customer_id: int, billing_month: int, billing_year: int) -> Tuple[BillingCycle, bool]:
    """
    生成或刷新单个客户的月度账单（不提交事务）
    返回 (账单, 是否新建)
    """
    monthly_total = monthly_order_total(db, customer_id, billing_month, billing_year)

    prev_month, prev_year = previous_period(billing_month, billing_year)
    previous = find_cycle(db, customer_id, prev_month, prev_year)
    carryover = to_money(previous.remaining_balance) if previous else ZERO

    total_amount = to_money(monthly_total + carryover)

    cycle = find_cycle(db, customer_id, billing_month, billing_year)
    if cycle is None:
        cycle = BillingCycle(
            customer_id=customer_id,
            billing_month=billing_month,
            billing_year=billing_year,
            previous_carryover=carryover,
        )
        apply_balance(cycle, total_amount, ZERO)
        db.add(cycle)
        return cycle, True

    # 已付金额保持不变
    cycle.previous_carryover = carryover
    apply_balance(cycle, total_amount, to_money(cycle.paid_amount))
    return cycle, False


def generate_monthly_bills(
    db: Session,
    billing_month: int,
    billing_year: int,
    customer_ids: Optional[Iterable[int]] = None
) -> BillGenerationResult:
    """
    为所有客户（或指定客户）生成/刷新某月账单
    整批在一个事务中提交，任何一个客户失败则整批回滚
    """
    validate_period(billing_month, billing_year)
    result = BillGenerationResult(billing_month=billing_month, billing_year=billing_year)

    query = db.query(Customer.id).order_by(Customer.id)
    if customer_ids is not None:
        query = query.filter(Customer.id.in_(list(customer_ids)))
    ids = [row.id for row in query.all()]

    logger.info("Generating billing cycles for %02d/%d (%d customers)", billing_month, billing_year, len(ids))
    try:
        for customer_id in ids:
            _, created = refresh_customer_cycle(db, customer_id, billing_month, billing_year)
            if created:
                result.created += 1
            else:
                result.updated += 1
            # 逐个客户写入，后续客户的查询能看到前面的变更
            db.flush()
        db.commit()
    except (StaleDataError, IntegrityError) as exc:
        db.rollback()
        logger.warning("Concurrent billing update for %02d/%d: %s", billing_month, billing_year, exc)
        raise ConcurrentUpdateError() from exc
    except AppError:
        db.rollback()
        raise
    except Exception as exc:
        db.rollback()
        logger.exception("Error generating monthly bills for %02d/%d", billing_month, billing_year)
        raise AppError("Failed to generate monthly bills") from exc

    logger.info(
        "Billing cycles for %02d/%d generated: %d created, %d updated",
        billing_month, billing_year, result.created, result.updated
    )
    return result


def get_billing_cycle(db: Session, billing_cycle_id: int) -> BillingCycle:
    cycle = db.query(BillingCycle).options(joinedload(BillingCycle.customer)).filter(
        BillingCycle.id == billing_cycle_id
    ).first()
    if not cycle:
        raise BillingCycleNotFound()
    return cycle


def list_billing_cycles(db: Session) -> List[BillingCycle]:
    """所有账单，最新的在前"""
    return db.query(BillingCycle).options(joinedload(BillingCycle.customer)).order_by(
        BillingCycle.created_at.desc(), BillingCycle.id.desc()
    ).all()


def record_payment(
    db: Session,
    billing_cycle_id: int,
    amount,
    payment_method: str,
    notes: Optional[str],
    created_by: int
) -> RecordedPayment:
    """
    登记一笔付款
    金额必须大于0且不超过当前剩余未付；付款记录和账单余额在同一事务中写入
    """
    payment_amount = parse_amount(amount)
    if payment_amount is None or payment_amount <= ZERO:
        raise PaymentValidationError("Payment amount must be greater than 0")

    cycle = db.query(BillingCycle).filter(BillingCycle.id == billing_cycle_id).first()
    if not cycle:
        raise BillingCycleNotFound()

    remaining = to_money(cycle.remaining_balance)
    if payment_amount > remaining:
        raise PaymentValidationError(
            f"Payment amount {payment_amount} exceeds remaining balance {remaining}"
        )

    payment = Payment(
        billing_cycle_id=cycle.id,
        amount=payment_amount,
        payment_method=payment_method,
        notes=notes,
        created_by=created_by,
    )
    db.add(payment)
    apply_balance(cycle, to_money(cycle.total_amount), to_money(cycle.paid_amount) + payment_amount)

    try:
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        logger.warning("Billing cycle %s changed while recording payment", billing_cycle_id)
        raise ConcurrentUpdateError() from exc
    except Exception as exc:
        db.rollback()
        logger.exception("Error recording payment for billing cycle %s", billing_cycle_id)
        raise AppError("Failed to record payment") from exc

    db.refresh(payment)
    db.refresh(cycle)
    logger.info(
        "Recorded payment %s of %s on billing cycle %s (remaining %s)",
        payment.id, payment_amount, cycle.id, cycle.remaining_balance
    )
    return RecordedPayment(payment=payment, billing_cycle=cycle)


def list_payments(db: Session, billing_cycle_id: int) -> List[Payment]:
    """某账单的付款记录，最新的在前"""
    if not db.query(BillingCycle.id).filter(BillingCycle.id == billing_cycle_id).first():
        raise BillingCycleNotFound()
    return db.query(Payment).options(joinedload(Payment.creator)).filter(
        Payment.billing_cycle_id == billing_cycle_id
    ).order_by(Payment.created_at.desc(), Payment.id.desc()).all()
