"""Paginated access to the orders index."""

import math
from dataclasses import dataclass

from protean.utils.globals import current_domain

from backoffice.projections.order_listing import OrderListing


def orders_per_page() -> int:
    return int(current_domain.config["custom"].get("ORDERS_PER_PAGE", 50))


@dataclass(frozen=True)
class Page:
    items: list
    current_page: int
    limit_value: int
    total_count: int

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total_count / self.limit_value))

    @property
    def offset_value(self) -> int:
        return (self.current_page - 1) * self.limit_value

    def is_first_page(self) -> bool:
        return self.current_page == 1

    def is_last_page(self) -> bool:
        return self.current_page >= self.total_pages

    def is_out_of_range(self) -> bool:
        return self.current_page > self.total_pages


def order_listing_page(account_id, page: int = 1, per_page: int | None = None) -> Page:
    """One page of the account's orders, newest first."""
    per_page = per_page or orders_per_page()
    page = max(1, int(page or 1))
    result = (
        current_domain.repository_for(OrderListing)
        ._dao.query.filter(account_id=str(account_id))
        .order_by("-created_at")
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )
    return Page(items=result.items, current_page=page, limit_value=per_page, total_count=result.total)
