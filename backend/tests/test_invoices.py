"""
发票HTML生成测试
"""
from datetime import datetime
from decimal import Decimal

import pytest

from app.schemas.billing import CustomerMonthlyOrders, MonthlyOrderTotal
from app.services import invoices, order_groups
from conftest import make_customer, make_order, make_service


@pytest.mark.parametrize("amount, currency, expected", [
    (Decimal("123456.5"), "INR", "₹1,23,456.50"),
    (Decimal("1234567.891"), "INR", "₹12,34,567.89"),
    (Decimal("999"), "INR", "₹999.00"),
    (0, "INR", "₹0.00"),
    (Decimal("1234.5"), "USD", "$1,234.50"),
    (Decimal("-1500"), "INR", "-₹1,500.00"),
])
def test_format_currency(amount, currency, expected):
    assert invoices.format_currency(amount, currency) == expected


def test_document_number_uses_millisecond_timestamp():
    now = datetime(2025, 3, 10, 12, 0, 0)
    assert invoices.document_number("INV", now) == f"INV-{int(now.timestamp() * 1000)}"


@pytest.fixture
def details(db, admin, worker):
    tiffin = make_service(db, "Tiffin", "1000.00")
    ravi = make_customer(db, "Ravi <b>Kumar</b>")
    make_order(db, ravi, tiffin, 2, admin, created_at=datetime(2025, 3, 10))
    make_order(db, ravi, tiffin, 1, worker, created_at=datetime(2025, 3, 11))
    return order_groups.list_orders_with_details(db)


def test_customer_invoice_sections_by_creator(details):
    group = order_groups.group_by_customer(details)[0]
    html = invoices.render_customer_invoice(group, now=datetime(2025, 3, 12))

    assert "CUSTOMER INVOICE" in html
    assert f"INV-CUSTOMER-{group.customer_id}-" in html
    assert "Creator: Admin - Total: ₹2,000.00" in html
    assert "Creator: Worker - Total: ₹1,000.00" in html
    assert "Total Amount: ₹3,000.00" in html
    assert "12/03/2025" in html
    # 名称需要转义
    assert "Ravi &lt;b&gt;Kumar&lt;/b&gt;" in html
    assert "<b>Kumar</b>" not in html


def test_creator_invoice_sections_by_customer(details):
    group = order_groups.group_by_creator(details)[0]
    html = invoices.render_creator_invoice(group)

    assert "Creator: Admin" in html
    assert "₹2,000.00" in html


def test_auto_print_script_only_when_requested(details):
    group = order_groups.group_by_creator_and_customer(details)[0]

    assert 'addEventListener("load"' not in invoices.render_creator_customer_invoice(group)
    assert 'addEventListener("load"' in invoices.render_creator_customer_invoice(group, auto_print=True)


def test_monthly_orders_report():
    report = CustomerMonthlyOrders(
        customer_id=1,
        customer_name="Ravi",
        monthly_totals=[
            MonthlyOrderTotal(year=2025, month=2, month_name="February 2025", total_amount=Decimal("150.00"), order_count=3),
            MonthlyOrderTotal(year=2025, month=3, month_name="March 2025", total_amount=Decimal("100000.00"), order_count=2),
        ],
    )
    html = invoices.render_monthly_orders_report(report)

    assert "MONTHLY ORDERS REPORT" in html
    assert "REPORT-" in html
    assert "March 2025" in html
    assert "₹1,00,150.00" in html


def test_monthly_orders_report_empty():
    report = CustomerMonthlyOrders(customer_id=1, customer_name="Ravi")
    html = invoices.render_monthly_orders_report(report)
    assert "No orders in the last 12 months" in html
