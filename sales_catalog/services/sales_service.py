"""
Sales service with transactional logic.
Handles sale creation, cancellation, retrieval and the external sale shape.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Dict, Optional, Any, Sequence
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload

from sales_catalog.models import Sale, SaleItem, PaymentMethod
from sales_catalog.exceptions import (
    BusinessLogicError, NotFoundError, ClientNotFoundError, EmptySaleError, PersistenceError
)
from sales_catalog.schemas import SaleCreateRequest
from sales_catalog.services.lookup_service import find_client_by_id, find_client_by_tax_id
from sales_catalog.services.pricing_service import PricedLine, evaluate_lines, aggregate_lines
from sales_catalog.utils.dates import as_utc, iso_utc
from sales_catalog.utils.money import to_money

logger = logging.getLogger(__name__)

DEFAULT_ANONYMOUS_TAX_ID = 'CF'
DEFAULT_PAGE_SIZE = 100


@dataclass(frozen=True, slots=True)
class SaleHeader:
    """Fully computed, non-line fields of a sale about to be written."""
    client_id: Optional[UUID]
    date: datetime
    payment_method: PaymentMethod
    subtotal: Decimal
    discount_total: Decimal
    total: Decimal


def resolve_client_id(session, client_id: Optional[UUID] = None, client_tax_id: Optional[str] = None,
                      anonymous_tax_id: str = DEFAULT_ANONYMOUS_TAX_ID) -> Optional[UUID]:
    """
    Turn a client reference into a client id, or None for an anonymous sale.

    Raises:
        ClientNotFoundError: the id or tax id does not match a live client
    """
    if client_tax_id is not None:
        if client_tax_id == anonymous_tax_id:
            return None
        client = find_client_by_tax_id(session, client_tax_id)
        if client is None:
            raise ClientNotFoundError(client_tax_id)
        return client.id

    if client_id is not None:
        client = find_client_by_id(session, client_id)
        if client is None:
            raise ClientNotFoundError(client_id)
        return client.id

    return None


def _is_foreign_key_violation(error: IntegrityError) -> bool:
    """PostgreSQL reports SQLSTATE 23503; SQLite only has the message text."""
    sqlstate = getattr(error.orig, 'sqlstate', None)
    if sqlstate:
        return sqlstate == '23503'
    return 'FOREIGN KEY' in str(error.orig).upper()


def persist_sale(session, header: SaleHeader, lines: Sequence[PricedLine]) -> Sale:
    """
    Write the sale header and all of its lines as one transaction.

    Either every row is committed or none is: any database error rolls the
    whole unit back. This is the only write path for new sales.

    Args:
        session: SQLAlchemy session
        header: Computed sale header
        lines: Priced lines, in display order

    Returns:
        The committed Sale (id and timestamps assigned)

    Raises:
        EmptySaleError: no lines
        BusinessLogicError: header totals are inconsistent
        PersistenceError: the transaction could not be committed
    """
    if not lines:
        raise EmptySaleError()
    if header.total != header.subtotal - header.discount_total:
        raise BusinessLogicError('Sale total does not match subtotal minus discounts')

    try:
        # 1. Create Sale
        sale = Sale(
            client_id=header.client_id,
            date=as_utc(header.date),
            subtotal=header.subtotal,
            discount_total=header.discount_total,
            total=header.total,
            payment_method=header.payment_method,
            is_canceled=False
        )
        session.add(sale)
        session.flush()

        # 2. Create SaleItems
        for line_no, line in enumerate(lines, start=1):
            sale.items.append(SaleItem(
                sale_id=sale.id,
                product_id=line.product_id,
                line_no=line_no,
                quantity=line.quantity,
                unit_price=line.unit_price,
                discount_applied=line.discount_applied
            ))

        session.commit()
        return sale

    except IntegrityError as e:
        session.rollback()
        logger.error("Sale write rejected by database constraints: %s", e.orig)
        if _is_foreign_key_violation(e):
            message = 'Sale could not be saved: a referenced client or product no longer exists'
        else:
            message = f'Sale could not be saved: constraint violated ({e.orig})'
        raise PersistenceError(message, cause=e, integrity=True) from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Sale write failed: %s", e, exc_info=True)
        raise PersistenceError(f'Sale could not be saved: {e}', cause=e) from e
    except Exception as e:
        # Driver errors SQLAlchemy does not wrap (e.g. OverflowError on bind)
        session.rollback()
        logger.error("Sale write failed: %s", e, exc_info=True)
        raise PersistenceError(f'Sale could not be saved: {e}', cause=e) from e


def create_sale(session, request: SaleCreateRequest,
                anonymous_tax_id: str = DEFAULT_ANONYMOUS_TAX_ID) -> Sale:
    """
    Create a sale end to end.

    Steps:
    1. Reject empty sales
    2. Resolve the client reference
    3. Price every line from the catalog (price snapshot + discount)
    4. Fold the lines into totals
    5. Write header and lines atomically
    6. Re-read the committed sale

    Discount eligibility is evaluated before the write transaction and not
    re-checked inside it.

    Raises:
        EmptySaleError, ClientNotFoundError, ProductUnavailableError: nothing is written
        PersistenceError: the write failed; nothing is written
    """
    try:
        if not request.items:
            raise EmptySaleError()

        client_id = resolve_client_id(
            session,
            client_id=request.client_id,
            client_tax_id=request.client_tax_id,
            anonymous_tax_id=anonymous_tax_id
        )

        sale_date = as_utc(request.date)
        priced_lines = evaluate_lines(session, request.items, sale_date)
        totals = aggregate_lines(priced_lines)

    except (BusinessLogicError, NotFoundError):
        # Only reads happened; release the read transaction
        session.rollback()
        raise

    header = SaleHeader(
        client_id=client_id,
        date=sale_date,
        payment_method=request.payment_method,
        subtotal=totals.subtotal,
        discount_total=totals.discount_total,
        total=totals.total
    )
    sale = persist_sale(session, header, priced_lines)

    logger.info(
        "Sale %s created: %d line(s), subtotal=%s discount=%s total=%s client=%s",
        sale.id, len(priced_lines), totals.subtotal, totals.discount_total, totals.total,
        client_id or 'anonymous'
    )
    return get_sale(session, sale.id)


def cancel_sale(session, sale_id: UUID) -> Sale:
    """
    Mark a sale as canceled.

    Idempotent: cancelling an already canceled sale succeeds without writing.
    Totals and lines are never touched.

    Raises:
        NotFoundError: the sale does not exist
        PersistenceError: the update could not be committed
    """
    try:
        updated = session.query(Sale).filter(
            Sale.id == sale_id,
            Sale.is_canceled == False  # noqa: E712
        ).update({Sale.is_canceled: True}, synchronize_session='fetch')
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Cancel of sale %s failed: %s", sale_id, e)
        raise PersistenceError(f'Sale could not be canceled: {e}', cause=e) from e

    sale = get_sale(session, sale_id)
    if updated:
        logger.info("Sale %s canceled", sale_id)
    else:
        logger.info("Sale %s was already canceled", sale_id)
    return sale


def get_sale(session, sale_id: UUID) -> Sale:
    """
    Fetch a sale with its items.

    Raises:
        NotFoundError: the sale does not exist
    """
    sale = session.query(Sale).options(selectinload(Sale.items)).filter(
        Sale.id == sale_id
    ).first()
    if sale is None:
        raise NotFoundError(f"Sale '{sale_id}' not found")
    return sale


def list_sales(session, skip: int = 0, take: int = DEFAULT_PAGE_SIZE) -> List[Sale]:
    """List sales, most recent business date first, items included."""
    if skip < 0 or take < 1:
        raise BusinessLogicError('skip must be >= 0 and take must be >= 1')

    return session.query(Sale).options(selectinload(Sale.items)).order_by(
        Sale.date.desc(),
        Sale.created_at.desc(),
        Sale.id
    ).offset(skip).limit(take).all()


def list_sale_items(session, sale_id: UUID) -> List[SaleItem]:
    """
    Items of one sale, in line order.

    Raises:
        NotFoundError: the sale does not exist
    """
    exists = session.query(Sale.id).filter(Sale.id == sale_id).first()
    if exists is None:
        raise NotFoundError(f"Sale '{sale_id}' not found")

    return session.query(SaleItem).filter(
        SaleItem.sale_id == sale_id
    ).order_by(SaleItem.line_no).all()


# =====================================================
# EXTERNAL SHAPE
# =====================================================

def sale_item_to_view(item: SaleItem) -> Dict[str, Any]:
    """Map a SaleItem to its API representation."""
    return {
        'id': str(item.id),
        'productId': str(item.product_id),
        'quantity': item.quantity,
        'unitPrice': to_money(item.unit_price),
        'discountApplied': to_money(item.discount_applied),
        'createdAt': iso_utc(item.created_at),
        'updatedAt': iso_utc(item.updated_at),
    }


def sale_to_view(sale: Sale) -> Dict[str, Any]:
    """Map a Sale (with items) to its API representation."""
    view: Dict[str, Any] = {'id': str(sale.id)}
    if sale.client_id is not None:
        view['clientId'] = str(sale.client_id)
    view.update({
        'date': iso_utc(sale.date),
        'subtotal': to_money(sale.subtotal),
        'discountTotal': to_money(sale.discount_total),
        'total': to_money(sale.total),
        'paymentMethod': PaymentMethod.parse(sale.payment_method).value,
        'isCanceled': bool(sale.is_canceled),
        'createdAt': iso_utc(sale.created_at),
        'updatedAt': iso_utc(sale.updated_at),
        'items': [sale_item_to_view(item) for item in sale.items],
    })
    return view
