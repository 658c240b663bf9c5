"""Back office database management CLI.

Creates and drops the database schema and fills a fresh database with
sample data. Reuses the setup_db/drop_db utilities of the domain.

Usage:
    python src/manage.py setup-db                 # Create all tables
    python src/manage.py drop-db                  # Drop all tables
    python src/manage.py seed --accounts 2        # Load sample data
"""

import argparse
import json
import random
import sys


def setup_databases():
    """Create database schemas for the back office domain."""
    from backoffice.domain import backoffice
    from backoffice.utils.db import setup_db

    print("Initializing backoffice domain...")
    backoffice.init()
    print("Creating backoffice database schema...")
    setup_db(backoffice)
    print("Done.")


def drop_databases():
    """Drop database schemas for the back office domain."""
    from backoffice.domain import backoffice
    from backoffice.utils.db import drop_db

    print("Initializing backoffice domain...")
    backoffice.init()
    print("Dropping backoffice database schema...")
    drop_db(backoffice)
    print("Done.")


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------
_SERVICES = [("Colissimo", "La Poste"), ("Express 24", "DHL"), ("Ground", "UPS")]
_CARRIERS = ["DHL", "UPS", "FedEx", "La Poste"]


def _line(fake) -> dict:
    return {
        "name": fake.catch_phrase()[:255],
        "sku": f"SKU-{fake.bothify('???-####').upper()}",
        "quantity": random.randint(1, 5),
        "unit_price": round(random.uniform(5.0, 250.0), 2),
    }


def _advance(process, order_id, service_id, account_id, fake):
    """Push an order some way along its lifecycle so every status shows up."""
    from backoffice.fulfillment.creation import CreateFulfillment
    from backoffice.fulfillment.delivery import DeliverFulfillment
    from backoffice.fulfillment.shipping import ShipFulfillment
    from backoffice.invoice.lookups import debit_invoice_for
    from backoffice.invoice.payment import MarkInvoicePaid
    from backoffice.invoice.sending import SendInvoice
    from backoffice.order.cancellation import CancelOrder
    from backoffice.order.invoicing import InvoiceOrder
    from backoffice.order.validation import ValidateOrder

    stage = random.choice(["pending", "validated", "invoiced", "paid", "shipped", "cancelled"])
    if stage == "pending":
        return
    if stage == "cancelled":
        process(CancelOrder(order_id=order_id))
        return

    process(ValidateOrder(order_id=order_id))
    if stage == "validated":
        return

    process(InvoiceOrder(order_id=order_id))
    invoice = debit_invoice_for(order_id)
    process(SendInvoice(invoice_id=str(invoice.id)))
    if stage == "invoiced":
        return

    process(MarkInvoicePaid(invoice_id=str(invoice.id)))
    if stage == "paid":
        return

    fulfillment_id = process(
        CreateFulfillment(account_id=account_id, fulfillment_service_id=service_id, order_id=order_id)
    )
    process(
        ShipFulfillment(
            fulfillment_id=fulfillment_id,
            tracking_number=fake.bothify("TRK##########").upper(),
            carrier=random.choice(_CARRIERS),
        )
    )
    if random.random() < 0.5:
        process(DeliverFulfillment(fulfillment_id=fulfillment_id))


def seed(accounts: int = 1, customers: int = 10, orders: int = 30, locale: str = "fr_FR"):
    """Build accounts with fulfillment services, customers and orders in mixed states."""
    from faker import Faker

    from backoffice.account.management import OpenAccount
    from backoffice.customer.registration import RegisterCustomer
    from backoffice.domain import backoffice
    from backoffice.fulfillment_service.management import RegisterFulfillmentService
    from backoffice.order.placement import PlaceOrder

    fake = Faker(locale)
    backoffice.init()

    with backoffice.domain_context():

        def process(command):
            return backoffice.process(command, asynchronous=False)

        for _ in range(accounts):
            account_id = process(OpenAccount(name=fake.company()[:255]))
            print(f"Seeding account {account_id}...")

            service_ids = [
                process(RegisterFulfillmentService(account_id=account_id, name=name, provider=provider))
                for name, provider in _SERVICES
            ]

            customer_ids = []
            for _ in range(customers):
                customer_ids.append(
                    process(
                        RegisterCustomer(
                            account_id=account_id,
                            first_name=fake.first_name()[:100],
                            last_name=fake.last_name()[:100],
                            email=fake.unique.email(),
                            phone=fake.phone_number()[:30],
                            address=fake.address(),
                        )
                    )
                )

            for _ in range(orders):
                order_id = process(
                    PlaceOrder(
                        account_id=account_id,
                        customer_id=random.choice(customer_ids),
                        notes=fake.sentence() if random.random() < 0.3 else None,
                        lines=json.dumps([_line(fake) for _ in range(random.randint(1, 4))]),
                    )
                )
                _advance(process, order_id, random.choice(service_ids), account_id, fake)

            print(f"  {customers} customers and {orders} orders ready.")

    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Back office database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    seed_parser = subparsers.add_parser("seed", help="Load sample accounts, customers and orders")
    seed_parser.add_argument("--accounts", type=int, default=1, help="Number of accounts (default: 1)")
    seed_parser.add_argument("--customers", type=int, default=10, help="Customers per account (default: 10)")
    seed_parser.add_argument("--orders", type=int, default=30, help="Orders per account (default: 30)")
    seed_parser.add_argument("--locale", default="fr_FR", help="Faker locale (default: fr_FR)")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases()
    elif args.command == "drop-db":
        drop_databases()
    elif args.command == "seed":
        seed(args.accounts, args.customers, args.orders, args.locale)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
