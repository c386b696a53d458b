"""
Flask CLI commands for database setup.

Commands:
- flask init-db: Create all tables
- flask seed-demo: Insert a demo product, discount and client
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import click
from sqlalchemy.exc import SQLAlchemyError

from sales_catalog.database import create_all, get_session
from sales_catalog.models import Client, Discount, Product


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create every table of the sales catalog."""
        try:
            create_all()
        except SQLAlchemyError as e:
            click.echo(click.style(f'Error creating tables: {e}', fg='red'))
            raise SystemExit(1)
        click.echo(click.style('Tables created.', fg='green', bold=True))

    @app.cli.command('seed-demo')
    @click.option('--tax-id', default='20123456789', show_default=True, help='Tax id of the demo client')
    def seed_demo(tax_id):
        """Insert a demo product with a 10% discount and a demo client."""
        db_session = get_session()

        product = db_session.query(Product).filter_by(code='DEMO-001').first()
        if product is not None:
            click.echo(click.style(f'Demo data already present (product {product.id})', fg='yellow'))
            return

        now = datetime.now(timezone.utc)
        try:
            product = Product(code='DEMO-001', name='Demo product', price=Decimal('5.00'))
            db_session.add(product)
            db_session.flush()

            db_session.add(Discount(
                code='DEMO-10',
                percentage=Decimal('10.00'),
                valid_from=now - timedelta(days=1),
                valid_to=now + timedelta(days=30),
                is_active=True,
                product_id=product.id
            ))
            client = Client(code='CLI-DEMO', name='Demo client', tax_id=tax_id)
            db_session.add(client)
            db_session.commit()
        except SQLAlchemyError as e:
            db_session.rollback()
            click.echo(click.style(f'Error seeding demo data: {e}', fg='red'))
            raise SystemExit(1)

        click.echo(click.style('\nDemo data created.', fg='green', bold=True))
        click.echo(f'   Product: {product.id} (5.00, 10% off)')
        click.echo(f'   Client:  {client.id} (tax id {tax_id})')
