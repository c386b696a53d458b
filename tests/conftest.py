import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
import uuid

from sales_catalog import create_app
from sales_catalog.database import create_all, drop_all, get_session
from sales_catalog.models import Product, Discount, Client


@pytest.fixture(scope='session')
def app():
    """Create application instance for testing (in-memory SQLite)."""
    app = create_app('config.TestingConfig')
    return app


@pytest.fixture(scope='function', autouse=True)
def tables(app):
    """Fresh schema for every test."""
    create_all()
    yield
    get_session().remove()
    drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Create database session for testing."""
    session = get_session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture(scope='function')
def now():
    """Current instant, UTC."""
    return datetime.now(timezone.utc)


def _code(prefix):
    return f'{prefix}-{str(uuid.uuid4())[:8]}'


@pytest.fixture(scope='function')
def product(session):
    """Create a sellable product priced 5.00."""
    product = Product(code=_code('PRD'), name='Test Product', price=Decimal('5.00'))
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


@pytest.fixture(scope='function')
def other_product(session):
    """Create a second sellable product priced 12.50, without discount."""
    product = Product(code=_code('PRD'), name='Other Product', price=Decimal('12.50'))
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


@pytest.fixture(scope='function')
def deleted_product(session):
    """Create a soft-deleted product."""
    product = Product(code=_code('DEL'), name='Deleted Product', price=Decimal('3.00'), is_deleted=True)
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


@pytest.fixture(scope='function')
def discount(session, product, now):
    """Attach an active 10% discount to product, valid yesterday to tomorrow."""
    discount = Discount(
        code=_code('DSC'),
        percentage=Decimal('10.00'),
        valid_from=now - timedelta(days=1),
        valid_to=now + timedelta(days=1),
        is_active=True,
        product_id=product.id
    )
    session.add(discount)
    session.commit()
    session.refresh(discount)
    return discount


@pytest.fixture(scope='function')
def buyer(session):
    """Create a client with a tax id."""
    client = Client(code=_code('CLI'), name='Test Client', tax_id='20111222333')
    session.add(client)
    session.commit()
    session.refresh(client)
    return client
