"""Sales JSON API: create, cancel, fetch and list sales."""
from typing import Tuple, Union
from uuid import UUID

from flask import Blueprint, Response, current_app, jsonify, request

from sales_catalog.database import get_session
from sales_catalog.exceptions import SalesCatalogError, ValidationError
from sales_catalog.schemas import parse_pagination, parse_sale_create
from sales_catalog.services.sales_service import (
    cancel_sale, create_sale, get_sale, list_sale_items, list_sales,
    sale_item_to_view, sale_to_view,
)
from sales_catalog.blueprints.metrics import record_sale_canceled, record_sale_created, record_sale_rejected

sales_bp = Blueprint('sales', __name__, url_prefix='/api/sales')


def _page_size(take) -> int:
    """Clamp the requested page size to the configured bounds."""
    default = current_app.config.get('SALES_DEFAULT_PAGE_SIZE', 100)
    maximum = current_app.config.get('SALES_MAX_PAGE_SIZE', 500)
    return min(take or default, maximum)


@sales_bp.route('', methods=['GET'])
def list_sales_view() -> Response:
    """List sales, most recent first (?skip=&take=)."""
    pagination = parse_pagination(request.args)
    sales = list_sales(get_session(), skip=pagination.skip, take=_page_size(pagination.take))
    return jsonify([sale_to_view(s) for s in sales])


@sales_bp.route('/<uuid:sale_id>', methods=['GET'])
def get_sale_view(sale_id: UUID) -> Response:
    """Single sale with its items."""
    return jsonify(sale_to_view(get_sale(get_session(), sale_id)))


@sales_bp.route('/<uuid:sale_id>/items', methods=['GET'])
def list_sale_items_view(sale_id: UUID) -> Response:
    """Items of one sale, in line order."""
    items = list_sale_items(get_session(), sale_id)
    return jsonify([sale_item_to_view(i) for i in items])


@sales_bp.route('', methods=['POST'])
def create_sale_view() -> Tuple[Response, int]:
    """
    Create a sale.

    Body: {date, paymentMethod, items: [{productId, quantity}], clientId? | clientNit?}
    Totals, unit prices and discounts are computed here; any submitted are ignored.
    """
    db_session = get_session()
    try:
        sale_request = parse_sale_create(request.get_json(silent=True))
        sale = create_sale(
            db_session,
            sale_request,
            anonymous_tax_id=current_app.config.get('ANONYMOUS_TAX_ID', 'CF')
        )
    except SalesCatalogError as e:
        reason = (e.payload or {}).get('type', 'business')
        record_sale_rejected(reason)
        current_app.logger.warning(f"Sale rejected [{reason}]: {e.message}")
        raise

    record_sale_created(sale_request.payment_method.value)
    return jsonify(sale_to_view(sale)), 201


@sales_bp.route('/<uuid:sale_id>/cancel', methods=['PATCH'])
def cancel_sale_view(sale_id: UUID) -> Union[Response, Tuple[str, int]]:
    """
    Cancel a sale. Idempotent.

    An optional body {"isCanceled": true} is accepted; a sale cannot be un-canceled.
    """
    body = request.get_json(silent=True) or {}
    if not isinstance(body, dict) or body.get('isCanceled', True) is not True:
        raise ValidationError(
            'A canceled sale cannot be reopened',
            issues=[{'loc': 'isCanceled', 'msg': 'must be true', 'type': 'value_error'}]
        )

    cancel_sale(get_session(), sale_id)
    record_sale_canceled()
    return '', 204
