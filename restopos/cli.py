# restopos/cli.py
import json

import click
import pandas as pd
from flask.cli import with_appcontext

from .extensions import db
from .model import Category, Product, ProductVariant, Promotion
from .pos.errors import RuleConfigError
from .services import promotion_service, sale_service

DEMO_MENU = {
    "Beverages": [
        ("101", "Tea", 10, []),
        ("102", "Coffee", 15, []),
        ("103", "Lime Juice", 0, [("Small", 20), ("Large", 30)]),
    ],
    "Snacks": [
        ("201", "Samosa", 12, []),
        ("202", "Vada", 8, []),
    ],
    "Meals": [
        ("301", "Veg Biryani", 0, [("Half", 80), ("Full", 140)]),
        ("302", "Parotta", 0, [("1 pc", 15), ("2 pc", 28)]),
    ],
    "Desserts": [
        ("500", "Gulab Jamun", 25, []),
    ],
}

DEMO_PROMOS = [
    {"code": "TEN", "type": "PERCENT", "note": "10% off everything",
     "trigger": {"kind": "ANY", "minPurchase": 0}, "reward": {"percent": 10, "maxDiscount": 100}},
    {"code": "FLAT50", "type": "AMOUNT", "note": "50 off above 300",
     "trigger": {"kind": "ANY", "minPurchase": 300}, "reward": {"amount": 50}},
    {"code": "TEA11", "type": "BOGO", "note": "Buy one tea get one",
     "trigger": {"kind": "PRODUCT", "productCode": "101", "minQty": 2}, "reward": {"buyQty": 1, "getQty": 1}},
    {"code": "SWEET", "type": "ITEM_FREE", "note": "Free jamun for every 2 meals",
     "trigger": {"kind": "CATEGORY", "categoryName": "Meals", "minQty": 2},
     "reward": {"rewardProductCode": "500", "rewardQty": 1}},
]


@click.command("seed-demo")
@with_appcontext
def seed_demo():
    """Load a small demo menu and a few promotions (skips what exists)."""
    added = 0
    for sort, (cat_name, items) in enumerate(DEMO_MENU.items()):
        cat = Category.query.filter_by(name=cat_name).first()
        if not cat:
            cat = Category(name=cat_name, sort_order=sort)
            db.session.add(cat)
            db.session.flush()
        for code, name, price, variants in items:
            if Product.query.filter_by(code=code).first():
                continue
            p = Product(code=code, name=name, price=price, category_id=cat.id)
            for vname, vprice in variants:
                p.variants.append(ProductVariant(name=vname, price=vprice))
            db.session.add(p)
            added += 1
    db.session.commit()

    promos_added = 0
    for payload in DEMO_PROMOS:
        if Promotion.query.filter_by(code=payload["code"]).first():
            continue
        promotion_service.save_rule(payload)
        promos_added += 1
    click.echo(f"Seeded {added} products and {promos_added} promotions")


@click.command("create-promo")
@with_appcontext
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def create_promo(path):
    """Create a promotion from a JSON file in the admin payload shape."""
    with open(path, encoding="utf-8") as fh:
        payload = json.load(fh)
    try:
        rule = promotion_service.save_rule(payload)
    except RuleConfigError as e:
        raise click.ClickException(str(e))
    click.echo(f"Promotion created: {rule.id} {rule.code} ({rule.type.value})")


@click.command("export-sales")
@with_appcontext
@click.option("--status", type=click.Choice(sale_service.SALE_STATUSES), default=None)
@click.option("--limit", type=int, default=10000, show_default=True)
@click.option("--out", "out_path", required=True, help=".csv or .xlsx")
def export_sales(status, limit, out_path):
    """Export invoices (one row per line item) for audit and reporting."""
    rows = []
    for sale in sale_service.list_sales(status=status, limit=limit):
        for item in sale.items:
            rows.append({
                "Invoice No": sale.invoice_no,
                "Date": sale.created_at,
                "Status": sale.status,
                "Payment Mode": sale.payment_mode,
                "Promo Code": sale.promo_code,
                "Code": item.product_code,
                "Item": item.name,
                "Variant": item.variant_name,
                "Qty": item.quantity,
                "Unit Price": float(item.unit_price or 0),
                "Free": bool(item.is_free),
                "Sub Total": float(sale.sub_total or 0),
                "Discount": float(sale.discount_total or 0),
                "Tax": float(sale.tax_total or 0),
                "Grand Total": float(sale.grand_total or 0),
                "Cancel Reason": sale.cancel_reason,
            })

    df = pd.DataFrame(rows)
    if out_path.lower().endswith(".xlsx"):
        df.to_excel(out_path, index=False)
    else:
        df.to_csv(out_path, index=False)
    click.echo(f"Exported {df['Invoice No'].nunique() if rows else 0} sales to {out_path}")


def register_cli(app):
    app.cli.add_command(seed_demo)
    app.cli.add_command(create_promo)
    app.cli.add_command(export_sales)
