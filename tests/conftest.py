from decimal import Decimal

import pytest

from restopos import create_app
from restopos.extensions import db
from restopos.model import Category, Product, ProductVariant
from restopos.pos.catalog import MemoryCatalog


@pytest.fixture
def catalog():
    cat = MemoryCatalog()
    cat.add("101", "Tea", "10", category="Beverages")
    cat.add("102", "Coffee", "15", category="Beverages")
    cat.add("201", "Samosa", "12", category="Snacks")
    cat.add("301", "Veg Biryani", "0", category="Meals", variants=[("1", "Half", "80"), ("2", "Full", "140")])
    cat.add("500", "Gulab Jamun", "25", category="Desserts")
    return cat


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "INVOICE_PREFIX": "TST",
        "TAX_RATE": "0",
    })
    with app.app_context():
        bev = Category(name="Beverages")
        meals = Category(name="Meals")
        desserts = Category(name="Desserts")
        db.session.add_all([bev, meals, desserts])
        db.session.flush()
        db.session.add_all([
            Product(code="101", name="Tea", price=Decimal("10"), category_id=bev.id),
            Product(code="102", name="Coffee", price=Decimal("15"), category_id=bev.id),
            Product(code="500", name="Gulab Jamun", price=Decimal("25"), category_id=desserts.id),
        ])
        biryani = Product(code="301", name="Veg Biryani", price=Decimal("0"), category_id=meals.id)
        biryani.variants.append(ProductVariant(name="Half", price=Decimal("80")))
        biryani.variants.append(ProductVariant(name="Full", price=Decimal("140")))
        db.session.add(biryani)
        db.session.commit()
        yield app
        db.session.remove()


@pytest.fixture
def client(app):
    return app.test_client()
