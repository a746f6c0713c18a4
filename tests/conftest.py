from datetime import datetime, timezone
from decimal import Decimal

import pytest

from collaborators import CartService, CategoryService, OrderService, ProductService
from errors import CollaboratorUnavailable
from schemas import Category, Order, Product


def make_product(product_id, category_id="c1", stock=3, price="10.00", **overrides):
    data = {
        "id": product_id,
        "title": f"Product {product_id}",
        "description": "A product",
        "brand": "Acme",
        "price": Decimal(price),
        "discount_percentage": 0,
        "rating": 4.5,
        "stock": stock,
        "images": [f"https://img.example.com/{product_id}/1.jpg"],
        "thumbnail": f"https://img.example.com/{product_id}/thumb.jpg",
        "category_id": category_id,
    }
    data.update(overrides)
    return Product(**data)


def make_order(order_id, items, user_id="u1", total="99.00"):
    return Order(
        id=order_id,
        user_id=user_id,
        items=[{"product_id": pid, "quantity": qty} for pid, qty in items],
        order_status="Shipped",
        payment_status="Paid",
        total_amount=Decimal(total),
        shipping_address={
            "name": "Ada Lovelace",
            "street": "12 Analytical Way",
            "city": "London",
            "state": "LDN",
            "zip_code": "N1 9GU",
            "country": "UK",
        },
        created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )


class FakeProductService(ProductService):
    def __init__(self, products=(), unavailable=()):
        self.products = {p.id: p for p in products}
        self.unavailable = set(unavailable)
        self.category_unavailable = False
        self.lookups = []

    async def get_product_by_id(self, product_id):
        self.lookups.append(product_id)
        if product_id in self.unavailable:
            raise CollaboratorUnavailable("product service")
        return self.products.get(product_id)

    async def get_products_by_category(self, category_id):
        if self.category_unavailable:
            raise CollaboratorUnavailable("product service")
        return [p for p in self.products.values() if p.category_id == category_id]


class FakeCategoryService(CategoryService):
    def __init__(self, categories=(), unavailable=False):
        self.categories = {c.id: c for c in categories}
        self.unavailable = unavailable

    async def get_category_by_id(self, category_id):
        if self.unavailable:
            raise CollaboratorUnavailable("category service")
        return self.categories.get(category_id)


class FakeOrderService(OrderService):
    def __init__(self, orders=(), unavailable=False):
        self.orders = list(orders)
        self.unavailable = unavailable

    async def get_orders_by_user(self, user_id):
        if self.unavailable:
            raise CollaboratorUnavailable("order service")
        return [o for o in self.orders if o.user_id == user_id]


class FakeCartService(CartService):
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    async def add_to_cart(self, user_id, product_id, quantity):
        self.calls.append((user_id, product_id, quantity))
        if self.fail:
            raise CollaboratorUnavailable("cart service", RuntimeError("write refused"))


@pytest.fixture
def phones():
    return Category(id="c1", slug="smartphones", name="Smartphones")


@pytest.fixture
def catalog():
    products = [make_product(f"p{i}") for i in range(1, 6)]
    products.append(make_product("solo", category_id=None))
    return FakeProductService(products)


@pytest.fixture
def categories(phones):
    return FakeCategoryService([phones])


@pytest.fixture
def cart_service():
    return FakeCartService()
