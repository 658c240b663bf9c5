"""Repository helpers walking whole tables."""

from backoffice.account.account import Account
from backoffice.account.management import OpenAccount
from backoffice.projections.order_listing import OrderListing
from backoffice.shared import records


def test_fetch_all_walks_batches_in_identifier_order(monkeypatch, process):
    monkeypatch.setattr(records, "_BATCH_SIZE", 2)
    opened = [process(OpenAccount(name=f"Account {number}")) for number in range(5)]

    fetched = [str(account.id) for account in records.fetch_all(Account)]

    assert fetched == sorted(opened)


def test_fetch_all_orders_projections_by_their_identifier(monkeypatch, account_id, place_order):
    monkeypatch.setattr(records, "_BATCH_SIZE", 2)
    placed = [place_order(reference=f"PO-{number}") for number in range(3)]

    fetched = [str(row.order_id) for row in records.fetch_all(OrderListing, account_id=account_id)]

    assert fetched == sorted(placed)
