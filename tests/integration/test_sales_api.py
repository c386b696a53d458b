"""
Integration tests for the sales HTTP API.
Requests go through Flask's test client against in-memory SQLite.
"""
import pytest
import uuid
from datetime import timedelta
from prometheus_client import REGISTRY

from sales_catalog.models import Sale


def _body(date, lines, **extra):
    body = {
        'date': date.isoformat(),
        'paymentMethod': 'cash',
        'items': [{'productId': str(pid), 'quantity': qty} for pid, qty in lines],
    }
    body.update(extra)
    return body


def _sample(name, labels=None):
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


def test_create_sale_returns_201_with_computed_totals(client, product, discount, now):
    product_id = product.id

    response = client.post('/api/sales', json=_body(now, [(product_id, 2)]))

    assert response.status_code == 201
    data = response.get_json()
    assert data['subtotal'] == 10.0
    assert data['discountTotal'] == 1.0
    assert data['total'] == 9.0
    assert data['paymentMethod'] == 'cash'
    assert data['isCanceled'] is False
    assert 'clientId' not in data
    assert data['items'][0]['productId'] == str(product_id)
    assert data['items'][0]['unitPrice'] == 5.0
    assert data['items'][0]['discountApplied'] == 1.0
    assert uuid.UUID(data['id'])


def test_create_sale_ignores_submitted_totals(client, product, now):
    product_id = product.id
    body = _body(now, [(product_id, 2)], subtotal=1, discountTotal=0, total=1)
    body['items'][0]['unitPrice'] = 0.01

    response = client.post('/api/sales', json=body)

    assert response.status_code == 201
    assert response.get_json()['total'] == 10.0


def test_create_sale_with_client_nit(client, product, buyer, now):
    product_id, buyer_id, tax_id = product.id, buyer.id, buyer.tax_id

    response = client.post('/api/sales', json=_body(now, [(product_id, 1)], clientNit=tax_id))

    assert response.status_code == 201
    assert response.get_json()['clientId'] == str(buyer_id)


def test_create_sale_deleted_product_is_422(client, session, deleted_product, now):
    product_id = deleted_product.id
    rejected_before = _sample('sales_rejected_total', {'reason': 'product_unavailable'})

    response = client.post('/api/sales', json=_body(now, [(product_id, 1)]))

    assert response.status_code == 422
    data = response.get_json()
    assert data['status'] == 'error'
    assert data['type'] == 'product_unavailable'
    assert data['productId'] == str(product_id)
    assert data['line'] == 1
    assert session.query(Sale).count() == 0
    assert _sample('sales_rejected_total', {'reason': 'product_unavailable'}) == rejected_before + 1


def test_create_sale_unknown_client_is_422(client, product, now):
    product_id = product.id

    response = client.post('/api/sales', json=_body(now, [(product_id, 1)], clientNit='00000000'))

    assert response.status_code == 422
    assert response.get_json()['type'] == 'client_not_found'


def test_create_sale_oversized_quantity_is_400(client, session, product, now):
    product_id = product.id

    response = client.post('/api/sales', json=_body(now, [(product_id, 2 ** 63)]))

    assert response.status_code == 400
    assert response.get_json()['type'] == 'validation'
    assert session.query(Sale).count() == 0


def test_create_sale_empty_items_is_422(client, now):
    response = client.post('/api/sales', json=_body(now, []))

    assert response.status_code == 422
    assert response.get_json()['type'] == 'empty_sale'


@pytest.mark.parametrize('body', [
    {'paymentMethod': 'cash', 'items': []},
    {'date': '2024-01-01T00:00:00Z', 'paymentMethod': 'bitcoin', 'items': []},
    {'date': '2024-01-01T00:00:00Z', 'paymentMethod': 'cash', 'items': [{'productId': 'x', 'quantity': 1}]},
])
def test_create_sale_invalid_body_is_400(client, body):
    response = client.post('/api/sales', json=body)

    assert response.status_code == 400
    data = response.get_json()
    assert data['type'] == 'validation'
    assert data['issues']


def test_create_sale_without_json_is_400(client):
    response = client.post('/api/sales', data='not json', content_type='text/plain')

    assert response.status_code == 400
    assert response.get_json()['type'] == 'validation'


def test_create_sale_counts_metric(client, product, now):
    product_id = product.id
    created_before = _sample('sales_created_total', {'payment_method': 'cash'})

    client.post('/api/sales', json=_body(now, [(product_id, 1)]))

    assert _sample('sales_created_total', {'payment_method': 'cash'}) == created_before + 1


def test_get_sale_and_items(client, product, other_product, now):
    product_id, other_id = product.id, other_product.id
    sale_id = client.post('/api/sales', json=_body(now, [(product_id, 1), (other_id, 2)])).get_json()['id']

    response = client.get(f'/api/sales/{sale_id}')
    assert response.status_code == 200
    assert response.get_json()['id'] == sale_id
    assert response.get_json()['total'] == 30.0

    response = client.get(f'/api/sales/{sale_id}/items')
    assert response.status_code == 200
    items = response.get_json()
    assert [i['productId'] for i in items] == [str(product_id), str(other_id)]
    assert [i['quantity'] for i in items] == [1, 2]


def test_get_unknown_sale_is_404(client):
    response = client.get(f'/api/sales/{uuid.uuid4()}')

    assert response.status_code == 404
    assert response.get_json()['status'] == 'error'


def test_get_sale_bad_id_is_404(client):
    assert client.get('/api/sales/not-a-uuid').status_code == 404


def test_list_sales_recent_first_and_paged(client, other_product, now):
    product_id = other_product.id
    ids = [
        client.post('/api/sales', json=_body(now - timedelta(days=d), [(product_id, 1)])).get_json()['id']
        for d in range(3)
    ]

    response = client.get('/api/sales')
    assert response.status_code == 200
    assert [s['id'] for s in response.get_json()] == ids

    response = client.get('/api/sales?skip=1&take=1')
    assert [s['id'] for s in response.get_json()] == ids[1:2]


def test_list_sales_take_is_capped(app, client, other_product, now):
    product_id = other_product.id
    for _ in range(3):
        client.post('/api/sales', json=_body(now, [(product_id, 1)]))

    original = app.config['SALES_MAX_PAGE_SIZE']
    app.config['SALES_MAX_PAGE_SIZE'] = 2
    try:
        response = client.get('/api/sales?take=50')
    finally:
        app.config['SALES_MAX_PAGE_SIZE'] = original

    assert len(response.get_json()) == 2


@pytest.mark.parametrize('query', ['skip=-1', 'take=0', 'take=abc'])
def test_list_sales_bad_paging_is_400(client, query):
    response = client.get(f'/api/sales?{query}')

    assert response.status_code == 400
    assert response.get_json()['type'] == 'validation'


def test_cancel_sale_is_idempotent(client, product, discount, now):
    product_id = product.id
    sale_id = client.post('/api/sales', json=_body(now, [(product_id, 2)])).get_json()['id']

    assert client.patch(f'/api/sales/{sale_id}/cancel').status_code == 204
    assert client.patch(f'/api/sales/{sale_id}/cancel', json={'isCanceled': True}).status_code == 204

    data = client.get(f'/api/sales/{sale_id}').get_json()
    assert data['isCanceled'] is True
    assert data['total'] == 9.0
    assert len(data['items']) == 1


def test_cancel_cannot_reopen(client, product, now):
    product_id = product.id
    sale_id = client.post('/api/sales', json=_body(now, [(product_id, 1)])).get_json()['id']

    response = client.patch(f'/api/sales/{sale_id}/cancel', json={'isCanceled': False})

    assert response.status_code == 400
    assert client.get(f'/api/sales/{sale_id}').get_json()['isCanceled'] is False


def test_cancel_unknown_sale_is_404(client):
    assert client.patch(f'/api/sales/{uuid.uuid4()}/cancel').status_code == 404


def test_method_not_allowed_is_json(client):
    response = client.delete(f'/api/sales/{uuid.uuid4()}')

    assert response.status_code == 405
    assert response.get_json()['status'] == 'error'


def test_health(client):
    response = client.get('/health')

    assert response.status_code == 200
    assert response.get_json() == {'status': 'healthy', 'database': 'connected'}


def test_metrics_endpoint(client):
    response = client.get('/metrics')

    assert response.status_code == 200
    assert b'sales_created_total' in response.data
    assert b'http_requests_total' in response.data
