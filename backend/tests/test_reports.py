"""
账单汇总与报表测试
"""
from datetime import date, datetime
from decimal import Decimal

import pytest

from app.core.errors import CustomerNotFound
from app.services import billing, reports
from conftest import make_customer, make_order, make_service, set_custom_price


@pytest.fixture
def tiffin(db):
    return make_service(db, "Tiffin", "10.00")


def test_billing_summary_totals_and_overdue(db, admin, tiffin):
    zed = make_customer(db, "Zed")
    anil = make_customer(db, "Anil")
    make_order(db, zed, tiffin, 30, admin, created_at=datetime(2025, 3, 5))
    make_order(db, anil, tiffin, 10, admin, created_at=datetime(2025, 3, 6))
    billing.generate_monthly_bills(db, 3, 2025)

    zed_cycle = billing.find_cycle(db, zed.id, 3, 2025)
    anil_cycle = billing.find_cycle(db, anil.id, 3, 2025)
    billing.record_payment(db, zed_cycle.id, Decimal("120"), "cash", None, admin.id)
    billing.record_payment(db, anil_cycle.id, Decimal("100"), "upi", None, admin.id)

    # 只有 Zed 的账单逾期：创建于40天前且仍有余额
    zed_cycle.created_at = datetime(2025, 3, 1)
    anil_cycle.created_at = datetime(2025, 3, 1)
    db.commit()

    summary = reports.get_billing_summary(db, now=datetime(2025, 4, 10))
    assert summary.total_billed == Decimal("400.00")
    assert summary.total_paid == Decimal("220.00")
    assert summary.total_outstanding == Decimal("180.00")
    assert summary.overdue_count == 1

    assert reports.get_billing_summary(db, now=datetime(2025, 3, 20)).overdue_count == 0


def test_billing_summary_empty(db):
    summary = reports.get_billing_summary(db)
    assert summary.total_billed == Decimal("0.00")
    assert summary.overdue_count == 0


def test_current_month_bills_sorted_by_customer_name(db):
    make_customer(db, "Zed", phone_number="111")
    make_customer(db, "Anil", phone_number="222")
    billing.generate_monthly_bills(db, 3, 2025)
    billing.generate_monthly_bills(db, 2, 2025)

    bills = reports.get_current_month_bills(db, now=datetime(2025, 3, 15))

    assert [bill.customer.name for bill in bills] == ["Anil", "Zed"]
    assert [bill.customer.phone_number for bill in bills] == ["222", "111"]
    assert all(bill.billing_month == 3 for bill in bills)


def test_customer_monthly_orders_trailing_year(db, admin, tiffin):
    customer = make_customer(db, "Ravi")
    set_custom_price(db, customer, tiffin, "9.00")
    make_order(db, customer, tiffin, 2, admin, created_at=datetime(2024, 4, 30))
    make_order(db, customer, tiffin, 3, admin, created_at=datetime(2025, 3, 10))
    make_order(db, customer, tiffin, 1, admin, created_at=datetime(2025, 3, 20))
    make_order(db, customer, tiffin, 5, admin, created_at=datetime(2024, 6, 1))

    report = reports.get_customer_monthly_orders(db, customer.id, now=datetime(2025, 5, 1))

    assert report.customer_name == "Ravi"
    assert [m.month_name for m in report.monthly_totals] == ["June 2024", "March 2025"]
    june, march = report.monthly_totals
    assert (june.order_count, june.total_amount) == (1, Decimal("45.00"))
    assert (march.order_count, march.total_amount) == (2, Decimal("36.00"))


def test_customer_monthly_orders_unknown_customer(db):
    with pytest.raises(CustomerNotFound):
        reports.get_customer_monthly_orders(db, 42)


def test_dashboard_stats(db, admin, tiffin):
    ravi = make_customer(db, "Ravi")
    meena = make_customer(db, "Meena")
    set_custom_price(db, meena, tiffin, "6.00")
    make_customer(db, "No Orders")
    make_order(db, ravi, tiffin, 3, admin)
    make_order(db, ravi, tiffin, 2, admin)
    make_order(db, meena, tiffin, 5, admin)

    stats = reports.get_dashboard_stats(db)

    assert stats.total_revenue == Decimal("80.00")
    assert stats.total_orders == 3
    assert stats.total_customers == 2
    assert stats.average_order_value == Decimal("26.67")


def test_dashboard_stats_without_orders(db):
    stats = reports.get_dashboard_stats(db)
    assert stats.total_orders == 0
    assert stats.average_order_value == Decimal("0.00")


def test_dashboard_chart_groups_by_day(db, admin, tiffin):
    customer = make_customer(db, "Ravi")
    make_order(db, customer, tiffin, 1, admin, created_at=datetime(2025, 3, 1, 9))
    make_order(db, customer, tiffin, 2, admin, created_at=datetime(2025, 3, 1, 18))
    make_order(db, customer, tiffin, 4, admin, created_at=datetime(2025, 3, 3, 12))
    make_order(db, customer, tiffin, 9, admin, created_at=datetime(2025, 1, 1))
    meena = make_customer(db, "Meena")
    set_custom_price(db, meena, tiffin, "7.50")
    make_order(db, meena, tiffin, 2, admin, created_at=datetime(2025, 3, 3, 15))

    points = reports.get_dashboard_chart_data(db, days=30, now=datetime(2025, 3, 10))

    assert [(p.date, p.revenue, p.orders) for p in points] == [
        (date(2025, 3, 1), Decimal("30.00"), 2),
        (date(2025, 3, 3), Decimal("55.00"), 2),
    ]
