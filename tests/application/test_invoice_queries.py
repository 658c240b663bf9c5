"""Receivables aging, payment follow-up and revenue reports."""

from datetime import UTC, datetime, timedelta

import pytest
from backoffice.invoice.lookups import debit_invoice_for
from backoffice.invoice.sending import SendInvoice
from backoffice.order.invoicing import InvoiceOrder
from backoffice.order.validation import ValidateOrder
from backoffice.queries.invoices import AgingReportQuery, InvoicesNeedingFollowUpQuery, RevenueQuery


def _later(days):
    return datetime.now(UTC) + timedelta(days=days)


@pytest.fixture()
def sent_invoice_id(process, place_order):
    """An invoice sent today, due in 30 days."""
    order_id = place_order()
    process(ValidateOrder(order_id=order_id))
    process(InvoiceOrder(order_id=order_id))
    invoice_id = str(debit_invoice_for(order_id).id)
    process(SendInvoice(invoice_id=invoice_id))
    return invoice_id


class TestAgingReport:
    @pytest.mark.parametrize(
        "days_later, bucket",
        [
            (0, "current"),
            (30, "current"),
            (31, "days_1_30"),
            (60, "days_1_30"),
            (61, "days_31_60"),
            (91, "days_61_90"),
            (121, "over_90"),
        ],
    )
    def test_buckets(self, account_id, sent_invoice_id, days_later, bucket):
        summary = AgingReportQuery(account_id=account_id, now=_later(days_later)).summary()
        assert summary[bucket] == {"count": 1, "total_amount": 25.5}
        assert sum(entry["count"] for entry in summary.values()) == 1

    def test_total_overdue_amount(self, account_id, sent_invoice_id):
        assert AgingReportQuery(account_id=account_id).total_overdue_amount() == 0
        assert AgingReportQuery(account_id=account_id, now=_later(45)).total_overdue_amount() == 25.5

    def test_paid_invoices_are_left_out(self, account_id, paid_order):
        assert AgingReportQuery.call(account_id=account_id) == []


class TestFollowUp:
    @pytest.mark.parametrize(
        "days_later, priority",
        [
            (23, "low"),
            (30, "low"),
            (31, "medium"),
            (59, "medium"),
            (60, "high"),
            (90, "high"),
            (91, "critical"),
        ],
    )
    def test_priorities(self, account_id, sent_invoice_id, days_later, priority):
        grouped = InvoicesNeedingFollowUpQuery(account_id=account_id, now=_later(days_later)).grouped_by_priority()
        assert [str(i.id) for i in grouped[priority]] == [sent_invoice_id]
        assert sum(len(group) for group in grouped.values()) == 1

    def test_not_yet_worth_chasing(self, account_id, sent_invoice_id):
        assert InvoicesNeedingFollowUpQuery.call(account_id=account_id) == []

    def test_due_today_and_tomorrow(self, account_id, sent_invoice_id):
        assert len(InvoicesNeedingFollowUpQuery(account_id=account_id, now=_later(30)).due_today()) == 1
        assert len(InvoicesNeedingFollowUpQuery(account_id=account_id, now=_later(29)).due_tomorrow()) == 1

    def test_stats(self, account_id, sent_invoice_id):
        stats = InvoicesNeedingFollowUpQuery(account_id=account_id, now=_later(40)).stats()
        assert stats["total_overdue"] == 1
        assert stats["total_overdue_amount"] == 25.5
        assert stats["critical_count"] == 0
        assert stats["average_days_overdue"] == 10.0


class TestRevenue:
    def test_totals(self, account_id, paid_order):
        query = RevenueQuery(account_id=account_id, period="this_month")
        assert query.total() == 25.5
        assert query.total_excluding_tax() == 25.5
        assert query.total_tax() == 0
        assert query.average_invoice_value() == 25.5

    def test_unknown_period_keeps_every_paid_invoice(self, account_id, paid_order):
        assert RevenueQuery(account_id=account_id, period="today", now=_later(400)).total() == 0
        assert RevenueQuery(account_id=account_id, period="someday", now=_later(400)).total() == 25.5

    def test_grouping(self, account_id, paid_order):
        today = datetime.now(UTC).date()
        query = RevenueQuery(account_id=account_id)
        assert query.by_month() == {f"{today.month:02d}": 25.5}
        assert query.by_quarter() == {(today.month - 1) // 3 + 1: 25.5}
        assert query.by_month(today.year - 1) == {}

    def test_comparison(self, account_id, paid_order):
        comparison = RevenueQuery(account_id=account_id).comparison("this_month", "last_month")
        assert comparison == {"current": 25.5, "previous": 0.0, "difference": 25.5, "growth_percentage": 100.0}

    def test_by_customer(self, account_id, customer_id, paid_order):
        assert RevenueQuery(account_id=account_id).by_customer() == [
            {"customer_id": customer_id, "first_name": "Jane", "last_name": "Doe", "total": 25.5}
        ]
