"""
Collaborator ports consumed by the aggregators, and their MongoDB adapters.

The ports return None for an absent record and raise CollaboratorUnavailable
for anything else that goes wrong (driver errors, an unreadable document on a
single-record lookup). List lookups skip unreadable documents instead.
pymongo is blocking, so every adapter call runs in a worker thread.
"""
import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Type, TypeVar

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import ValidationError
from pymongo.database import Database
from pymongo.errors import PyMongoError

from database import get_documents
from errors import CollaboratorUnavailable
from schemas import Category, Order, Product

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ProductService(ABC):
    @abstractmethod
    async def get_product_by_id(self, product_id: str) -> Optional[Product]:
        ...

    @abstractmethod
    async def get_products_by_category(self, category_id: str) -> List[Product]:
        ...


class CategoryService(ABC):
    @abstractmethod
    async def get_category_by_id(self, category_id: str) -> Optional[Category]:
        ...


class OrderService(ABC):
    @abstractmethod
    async def get_orders_by_user(self, user_id: str) -> List[Order]:
        ...


class CartService(ABC):
    @abstractmethod
    async def add_to_cart(self, user_id: str, product_id: str, quantity: int) -> None:
        """Raise CollaboratorUnavailable when the cart could not be updated."""


# -----------------
# MongoDB adapters
# -----------------
def to_public_doc(doc: dict) -> dict:
    d = {**doc}
    if "_id" in d:
        d["id"] = str(d.pop("_id"))
    return d


def parse_object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def validate_each(model: Type[T], docs: Iterable[dict], collection_name: str) -> List[T]:
    """Validate documents one by one, skipping (and logging) the unreadable ones."""
    records = []
    for doc in docs:
        try:
            records.append(model.model_validate(to_public_doc(doc)))
        except ValidationError as e:
            logger.warning("skipping unreadable %s document %s: %s", collection_name, doc.get("_id"), e)
    return records


class MongoCollaborator:
    name = "store"

    def __init__(self, database: Optional[Database]):
        self.db = database

    async def _run(self, fn: Callable[[Database], T]) -> T:
        if self.db is None:
            raise CollaboratorUnavailable(self.name, RuntimeError("Database not configured"))
        try:
            return await asyncio.to_thread(fn, self.db)
        except (PyMongoError, ValidationError) as e:
            logger.error("%s call failed: %s", self.name, e)
            raise CollaboratorUnavailable(self.name, e) from e


class MongoProductService(MongoCollaborator, ProductService):
    name = "product service"

    async def get_product_by_id(self, product_id: str) -> Optional[Product]:
        oid = parse_object_id(product_id)
        if oid is None:
            return None

        def find(db: Database) -> Optional[Product]:
            doc = db["product"].find_one({"_id": oid})
            return Product.model_validate(to_public_doc(doc)) if doc else None

        return await self._run(find)

    async def get_products_by_category(self, category_id: str) -> List[Product]:
        def find(db: Database) -> List[Product]:
            docs = get_documents(db, "product", {"categoryId": category_id})
            return validate_each(Product, docs, "product")

        return await self._run(find)


class MongoCategoryService(MongoCollaborator, CategoryService):
    name = "category service"

    async def get_category_by_id(self, category_id: str) -> Optional[Category]:
        oid = parse_object_id(category_id)
        if oid is None:
            return None

        def find(db: Database) -> Optional[Category]:
            doc = db["category"].find_one({"_id": oid})
            return Category.model_validate(to_public_doc(doc)) if doc else None

        return await self._run(find)


class MongoOrderService(MongoCollaborator, OrderService):
    name = "order service"

    async def get_orders_by_user(self, user_id: str) -> List[Order]:
        def find(db: Database) -> List[Order]:
            docs = get_documents(db, "order", {"userId": user_id})
            return validate_each(Order, docs, "order")

        return await self._run(find)


class MongoCartService(MongoCollaborator, CartService):
    name = "cart service"

    async def add_to_cart(self, user_id: str, product_id: str, quantity: int) -> None:
        def upsert(db: Database) -> None:
            carts = db["cart"]
            now = datetime.now(timezone.utc)
            # Each step is a single atomic update; no read-modify-write of the items array
            merged = carts.update_one(
                {"userId": user_id, "items.productId": product_id},
                {"$inc": {"items.$.quantity": quantity}, "$set": {"updatedAt": now}},
            )
            if merged.matched_count:
                return
            item = {"productId": product_id, "quantity": quantity}
            pushed = carts.update_one(
                {"userId": user_id, "items.productId": {"$ne": product_id}},
                {"$push": {"items": item}, "$set": {"updatedAt": now}},
            )
            if pushed.matched_count:
                return
            carts.update_one(
                {"userId": user_id},
                {"$push": {"items": item}, "$set": {"updatedAt": now}, "$setOnInsert": {"createdAt": now}},
                upsert=True,
            )

        await self._run(upsert)
