"""
账单引擎测试
"""
from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import text

from app.core.errors import (
    BillingCycleNotFound, ConcurrentUpdateError, InvalidBillingPeriod, PaymentValidationError,
)
from app.models import BillingCycle, Payment
from app.services import billing
from app.services.pricing import effective_price
from conftest import make_customer, make_order, make_service, set_custom_price


@pytest.fixture
def tiffin(db):
    return make_service(db, "Tiffin", "10.00")


@pytest.fixture
def customer(db):
    return make_customer(db, "Ravi Kumar")


def _pay(db, cycle_id, amount, user):
    return billing.record_payment(db, cycle_id, Decimal(amount), "cash", None, user.id)


def test_month_bounds_are_half_open():
    assert billing.month_bounds(3, 2025) == (datetime(2025, 3, 1), datetime(2025, 4, 1))
    assert billing.month_bounds(12, 2024) == (datetime(2024, 12, 1), datetime(2025, 1, 1))


def test_previous_period_wraps_january():
    assert billing.previous_period(1, 2025) == (12, 2024)
    assert billing.previous_period(7, 2025) == (6, 2025)


@pytest.mark.parametrize("month, year", [(0, 2025), (13, 2025), (3, 0)])
def test_invalid_period_rejected(db, month, year):
    with pytest.raises(InvalidBillingPeriod):
        billing.generate_monthly_bills(db, month, year)


def test_first_bill_then_partial_payment(db, admin, customer, tiffin, march_2025):
    make_order(db, customer, tiffin, 30, admin, created_at=march_2025)

    result = billing.generate_monthly_bills(db, 3, 2025)
    assert (result.created, result.updated) == (1, 0)

    cycle = billing.find_cycle(db, customer.id, 3, 2025)
    assert cycle.total_amount == Decimal("300.00")
    assert cycle.previous_carryover == Decimal("0.00")
    assert cycle.remaining_balance == Decimal("300.00")
    assert cycle.is_closed is False

    recorded = _pay(db, cycle.id, "120", admin)
    assert recorded.payment.amount == Decimal("120.00")
    assert recorded.billing_cycle.paid_amount == Decimal("120.00")
    assert recorded.billing_cycle.remaining_balance == Decimal("180.00")
    assert recorded.billing_cycle.is_closed is False


def test_remaining_balance_carries_into_next_month(db, admin, customer, tiffin, march_2025):
    make_order(db, customer, tiffin, 30, admin, created_at=march_2025)
    billing.generate_monthly_bills(db, 3, 2025)
    march = billing.find_cycle(db, customer.id, 3, 2025)
    _pay(db, march.id, "120", admin)

    make_order(db, customer, tiffin, 5, admin, created_at=datetime(2025, 4, 2, 9, 30))
    billing.generate_monthly_bills(db, 4, 2025)

    april = billing.find_cycle(db, customer.id, 4, 2025)
    assert april.previous_carryover == Decimal("180.00")
    assert april.total_amount == Decimal("230.00")
    assert april.remaining_balance == Decimal("230.00")


def test_january_carries_over_from_previous_december(db, admin, customer, tiffin):
    make_order(db, customer, tiffin, 7, admin, created_at=datetime(2024, 12, 31, 23, 59, 59))
    billing.generate_monthly_bills(db, 12, 2024)
    billing.generate_monthly_bills(db, 1, 2025)

    january = billing.find_cycle(db, customer.id, 1, 2025)
    assert january.previous_carryover == Decimal("70.00")
    assert january.total_amount == Decimal("70.00")


def test_orders_on_month_edges_are_counted_once(db, admin, customer, tiffin):
    make_order(db, customer, tiffin, 1, admin, created_at=datetime(2025, 3, 1, 0, 0, 0))
    make_order(db, customer, tiffin, 2, admin, created_at=datetime(2025, 3, 31, 23, 59, 59))
    make_order(db, customer, tiffin, 4, admin, created_at=datetime(2025, 4, 1, 0, 0, 0))

    assert billing.monthly_order_total(db, customer.id, 3, 2025) == Decimal("30.00")
    assert billing.monthly_order_total(db, customer.id, 4, 2025) == Decimal("40.00")


def test_database_default_timestamp_counts_in_its_own_month(db, admin, customer, tiffin):
    # 数据库默认值 CURRENT_TIMESTAMP 的格式，不带微秒
    db.execute(text(
        "INSERT INTO orders (customer_id, service_id, quantity, created_by, created_at, updated_at) "
        "VALUES (:customer_id, :service_id, 1, :created_by, '2025-04-01 00:00:00', '2025-04-01 00:00:00')"
    ), {"customer_id": customer.id, "service_id": tiffin.id, "created_by": admin.id})
    db.commit()

    assert billing.monthly_order_total(db, customer.id, 3, 2025) == Decimal("0.00")
    assert billing.monthly_order_total(db, customer.id, 4, 2025) == Decimal("10.00")


def test_microseconds_do_not_move_order_across_month(db, admin, customer, tiffin):
    make_order(db, customer, tiffin, 1, admin, created_at=datetime(2025, 4, 1, 0, 0, 0, 500000))
    make_order(db, customer, tiffin, 2, admin, created_at=datetime(2025, 3, 31, 23, 59, 59, 999999))

    assert billing.monthly_order_total(db, customer.id, 3, 2025) == Decimal("20.00")
    assert billing.monthly_order_total(db, customer.id, 4, 2025) == Decimal("10.00")


def test_payments_close_cycle_and_further_payment_rejected(db, admin, customer, tiffin, march_2025):
    make_order(db, customer, tiffin, 18, admin, created_at=march_2025)
    billing.generate_monthly_bills(db, 3, 2025)
    cycle = billing.find_cycle(db, customer.id, 3, 2025)

    _pay(db, cycle.id, "100", admin)
    recorded = _pay(db, cycle.id, "80", admin)
    assert recorded.billing_cycle.remaining_balance == Decimal("0.00")
    assert recorded.billing_cycle.is_closed is True

    with pytest.raises(PaymentValidationError):
        _pay(db, cycle.id, "1", admin)
    assert db.query(Payment).count() == 2


def test_payment_larger_than_remaining_rejected(db, admin, customer, tiffin, march_2025):
    make_order(db, customer, tiffin, 3, admin, created_at=march_2025)
    billing.generate_monthly_bills(db, 3, 2025)
    cycle = billing.find_cycle(db, customer.id, 3, 2025)

    with pytest.raises(PaymentValidationError):
        _pay(db, cycle.id, "30.01", admin)

    db.refresh(cycle)
    assert cycle.paid_amount == Decimal("0.00")
    assert db.query(Payment).count() == 0


@pytest.mark.parametrize("amount", ["0", "-5", "abc", None])
def test_non_positive_or_invalid_amount_rejected(db, admin, customer, tiffin, march_2025, amount):
    make_order(db, customer, tiffin, 3, admin, created_at=march_2025)
    billing.generate_monthly_bills(db, 3, 2025)
    cycle = billing.find_cycle(db, customer.id, 3, 2025)

    with pytest.raises(PaymentValidationError):
        billing.record_payment(db, cycle.id, amount, "cash", None, admin.id)


def test_payment_for_unknown_cycle(db, admin):
    with pytest.raises(BillingCycleNotFound) as exc_info:
        _pay(db, 999, "10", admin)
    assert exc_info.value.detail == "Billing cycle not found"
    assert exc_info.value.status_code == 404


def test_customer_without_orders_gets_closed_zero_bill(db, customer):
    billing.generate_monthly_bills(db, 3, 2025)

    cycle = billing.find_cycle(db, customer.id, 3, 2025)
    assert cycle.total_amount == Decimal("0.00")
    assert cycle.remaining_balance == Decimal("0.00")
    assert cycle.is_closed is True


def test_regeneration_is_idempotent(db, admin, customer, tiffin, march_2025):
    make_order(db, customer, tiffin, 30, admin, created_at=march_2025)
    billing.generate_monthly_bills(db, 3, 2025)
    first = billing.find_cycle(db, customer.id, 3, 2025)
    snapshot = (first.id, first.total_amount, first.previous_carryover, first.remaining_balance, first.version)

    result = billing.generate_monthly_bills(db, 3, 2025)
    assert (result.created, result.updated) == (0, 1)

    db.expire_all()
    again = billing.find_cycle(db, customer.id, 3, 2025)
    assert (again.id, again.total_amount, again.previous_carryover, again.remaining_balance, again.version) == snapshot
    assert db.query(BillingCycle).count() == 1


def test_regeneration_keeps_payments_and_recomputes_balance(db, admin, customer, tiffin, march_2025):
    make_order(db, customer, tiffin, 30, admin, created_at=march_2025)
    billing.generate_monthly_bills(db, 3, 2025)
    cycle = billing.find_cycle(db, customer.id, 3, 2025)
    _pay(db, cycle.id, "300", admin)
    db.refresh(cycle)
    assert cycle.is_closed is True

    # 付清后又补了一单
    make_order(db, customer, tiffin, 1, admin, created_at=march_2025)
    billing.generate_monthly_bills(db, 3, 2025)

    db.refresh(cycle)
    assert cycle.total_amount == Decimal("310.00")
    assert cycle.paid_amount == Decimal("300.00")
    assert cycle.remaining_balance == Decimal("10.00")
    assert cycle.is_closed is False


def test_custom_price_takes_precedence(db, admin, customer, tiffin, march_2025):
    other = make_customer(db, "Meena")
    set_custom_price(db, customer, tiffin, "8.50")

    assert effective_price(db, customer.id, tiffin.id) == Decimal("8.50")
    assert effective_price(db, other.id, tiffin.id) == Decimal("10.00")

    make_order(db, customer, tiffin, 10, admin, created_at=march_2025)
    make_order(db, other, tiffin, 10, admin, created_at=march_2025)
    billing.generate_monthly_bills(db, 3, 2025)

    assert billing.find_cycle(db, customer.id, 3, 2025).total_amount == Decimal("85.00")
    assert billing.find_cycle(db, other.id, 3, 2025).total_amount == Decimal("100.00")


def test_generation_can_be_limited_to_customers(db, customer):
    other = make_customer(db, "Meena")

    result = billing.generate_monthly_bills(db, 3, 2025, customer_ids=[other.id])

    assert result.processed == 1
    assert billing.find_cycle(db, customer.id, 3, 2025) is None
    assert billing.find_cycle(db, other.id, 3, 2025) is not None


def test_stale_cycle_update_raises_conflict(db, session_factory, admin, customer, tiffin, march_2025):
    make_order(db, customer, tiffin, 30, admin, created_at=march_2025)
    billing.generate_monthly_bills(db, 3, 2025)
    cycle = billing.find_cycle(db, customer.id, 3, 2025)
    assert cycle.remaining_balance == Decimal("300.00")

    # 另一个请求先付了一笔
    other = session_factory()
    try:
        _pay(other, cycle.id, "100", admin)
    finally:
        other.close()

    with pytest.raises(ConcurrentUpdateError):
        _pay(db, cycle.id, "50", admin)

    db.expire_all()
    cycle = billing.find_cycle(db, customer.id, 3, 2025)
    assert cycle.paid_amount == Decimal("100.00")
    assert db.query(Payment).count() == 1


def test_list_payments_newest_first(db, admin, customer, tiffin, march_2025):
    make_order(db, customer, tiffin, 30, admin, created_at=march_2025)
    billing.generate_monthly_bills(db, 3, 2025)
    cycle = billing.find_cycle(db, customer.id, 3, 2025)
    first = _pay(db, cycle.id, "10", admin).payment
    second = _pay(db, cycle.id, "20", admin).payment

    payments = billing.list_payments(db, cycle.id)
    assert [p.id for p in payments] == [second.id, first.id]
    assert payments[0].creator.name == "Admin"

    with pytest.raises(BillingCycleNotFound):
        billing.list_payments(db, 12345)
