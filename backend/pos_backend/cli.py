# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/pos_backend/cli.py
# Commands Legend:
# Prereqs:
# - Activate your virtualenv and `pip install -e .`.
# - Set FLASK_APP (PowerShell: $env:FLASK_APP="pos_backend:create_app").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system seed-demo [--business "Demo Shop"]
#   Create a demo business, branch and a few stocked products.
#
# Inspection:
# - python -m flask sales recent --business-id <id> [--limit 10]
#   List the most recent sales of a business.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Business, Branch, Product
from .models.sales import cents_to_amount
from .services import sales_service


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system seed-demo' for sample data.")


DEMO_PRODUCTS = [
    # name, price_cents, stock, low_stock_threshold
    ("Bottled Water 75cl", 25000, 120, 20),
    ("Paracetamol 500mg (strip)", 50000, 40, 10),
    ("Bread Loaf", 120000, 15, 5),
]


@system_group.command('seed-demo')
@click.option('--business', 'business_name', default='Demo Shop', help='Business name')
@with_appcontext
def seed_demo(business_name):
    """Create a demo business with one branch and stocked products."""
    business = db.session.query(Business).filter_by(name=business_name).first()
    if business:
        click.echo(f"PASS Using existing business: {business.name} (ID: {business.id})")
    else:
        business = Business(name=business_name)
        db.session.add(business)
        db.session.flush()
        click.echo(f"PASS Created business: {business.name} (ID: {business.id})")

    branch = db.session.query(Branch).filter_by(business_id=business.id, is_main_branch=True).first()
    if not branch:
        branch = Branch(business_id=business.id, branch_name="Main Branch", is_main_branch=True)
        db.session.add(branch)
        db.session.flush()
    click.echo(f"PASS Branch: {branch.branch_name} (ID: {branch.id})")

    for name, price_cents, stock, threshold in DEMO_PRODUCTS:
        product = Product.active().filter_by(business_id=business.id, product_name=name).first()
        if product:
            continue
        product = Product(
            business_id=business.id,
            branch_id=branch.id,
            product_name=name,
            selling_price_cents=price_cents,
            quantity_in_stock=stock,
            low_stock_threshold=threshold,
        )
        db.session.add(product)
        db.session.flush()
        click.echo(f"  + {name}: {cents_to_amount(price_cents):.2f} x {stock} (ID: {product.id})")

    db.session.commit()
    click.echo("PASS Demo data ready.")


@click.group('sales')
def sales_group():
    """Sale inspection commands."""


@sales_group.command('recent')
@click.option('--business-id', required=True, help='Business ID')
@click.option('--branch-id', default=None, help='Restrict to one branch')
@click.option('--limit', default=10, show_default=True, type=int)
@with_appcontext
def recent_sales(business_id, branch_id, limit):
    """List the most recent sales of a business."""
    sales = sales_service.recent_sales(business_id, branch_id, limit=limit)
    if not sales:
        click.echo("No sales found.")
        return

    for sale in sales:
        click.echo(
            f"{sale.id}  branch={sale.branch_id}  cashier={sale.cashier_id}  "
            f"total={cents_to_amount(sale.total_amount_cents):.2f}  "
            f"method={sale.payment_method}  at={sale.created_at}"
        )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(sales_group)
