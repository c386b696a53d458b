"""
Pricing service: line evaluation and sale totals.

Every amount is derived from the catalog at evaluation time; nothing the
caller submits is trusted. Evaluation only reads (product and discount
lookups) and never writes.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence
from uuid import UUID

from sales_catalog.exceptions import EmptySaleError, ProductUnavailableError, BusinessLogicError
from sales_catalog.models import Discount
from sales_catalog.services.lookup_service import find_product_by_id, find_discount_by_product_id
from sales_catalog.utils.dates import as_utc
from sales_catalog.utils.money import ZERO, to_money, percentage_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PricedLine:
    """A sale line with its price snapshot and the discount it earned."""
    product_id: UUID
    quantity: int
    unit_price: Decimal
    discount_applied: Decimal

    @property
    def line_subtotal(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)


@dataclass(frozen=True, slots=True)
class SaleTotals:
    """Folded totals of a sale. total == subtotal - discount_total."""
    subtotal: Decimal
    discount_total: Decimal
    total: Decimal


def is_discount_eligible(discount: Optional[Discount], sale_date: datetime) -> bool:
    """
    Decide whether a discount applies on a given sale date.

    Requires all of: a discount exists, it is active, and the date falls in
    [valid_from, valid_to]. Both bounds are inclusive; a missing valid_to
    leaves the window open.
    """
    if discount is None or not discount.is_active:
        return False

    when = as_utc(sale_date)
    if when < as_utc(discount.valid_from):
        return False
    if discount.valid_to is not None and when > as_utc(discount.valid_to):
        return False
    return True


def evaluate_line(session, product_id: UUID, quantity: int, sale_date: datetime,
                  line: Optional[int] = None) -> PricedLine:
    """
    Price one requested line.

    Args:
        session: SQLAlchemy session used for the catalog reads
        product_id: Product being sold
        quantity: Units (positive integer)
        sale_date: Business date of the sale, decides discount eligibility
        line: 1-based position of the line in the request, for error reporting

    Returns:
        PricedLine with the unit price snapshot and discount amount

    Raises:
        ProductUnavailableError: product missing or soft-deleted
        BusinessLogicError: quantity is not a positive integer
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise BusinessLogicError(f'Quantity must be a positive integer (line {line})')

    # 1. Product must exist and not be deleted
    product = find_product_by_id(session, product_id)
    if product is None or not product.is_available:
        raise ProductUnavailableError(product_id, line=line)

    # 2. Snapshot price
    unit_price = to_money(product.price)
    line_subtotal = to_money(unit_price * quantity)

    # 3. Discount, if one exists and its window covers the sale date
    discount = find_discount_by_product_id(session, product.id)
    discount_applied = ZERO
    if is_discount_eligible(discount, sale_date):
        discount_applied = percentage_of(line_subtotal, discount.percentage)
        # Never negative, never more than the line itself
        discount_applied = min(max(discount_applied, ZERO), line_subtotal)

    return PricedLine(
        product_id=product.id,
        quantity=quantity,
        unit_price=unit_price,
        discount_applied=discount_applied
    )


def evaluate_lines(session, lines: Sequence, sale_date: datetime) -> List[PricedLine]:
    """
    Price every requested line, in order.

    Lines are objects with product_id and quantity attributes (e.g.
    SaleLineRequest). The first unavailable product aborts evaluation.

    Raises:
        EmptySaleError: no lines were requested
        ProductUnavailableError: any line references an unavailable product
    """
    if not lines:
        raise EmptySaleError()

    priced = [
        evaluate_line(session, item.product_id, item.quantity, sale_date, line=idx)
        for idx, item in enumerate(lines, start=1)
    ]
    logger.debug("Evaluated %d sale line(s) for %s", len(priced), sale_date.isoformat())
    return priced


def aggregate_lines(lines: Iterable[PricedLine]) -> SaleTotals:
    """
    Fold priced lines into sale totals.

    Per-line discounts are already rounded to cents, so the sums carry no
    fractional-cent drift across lines.

    Raises:
        EmptySaleError: if there are no lines
    """
    lines = list(lines)
    if not lines:
        raise EmptySaleError()

    subtotal = ZERO
    discount_total = ZERO
    for line in lines:
        subtotal += line.line_subtotal
        discount_total += to_money(line.discount_applied)

    subtotal = to_money(subtotal)
    discount_total = to_money(discount_total)

    return SaleTotals(
        subtotal=subtotal,
        discount_total=discount_total,
        total=to_money(subtotal - discount_total)
    )


__all__ = [
    'PricedLine',
    'SaleTotals',
    'is_discount_eligible',
    'evaluate_line',
    'evaluate_lines',
    'aggregate_lines',
]
