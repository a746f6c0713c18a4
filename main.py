import logging
import os
import sys
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware

import database
from cart import add_to_cart, quick_add_to_cart
from collaborators import (
    CartService,
    CategoryService,
    MongoCartService,
    MongoCategoryService,
    MongoOrderService,
    MongoProductService,
    OrderService,
    ProductService,
)
from errors import CollaboratorUnavailable, ConstraintViolation, NotFound, OutOfStock
from order_history import OrderHistoryAggregator
from product_detail import ProductDetailAggregator
from quantity import QuantityController
from schemas import (
    CartItemRequest,
    CartMutationResult,
    EnrichedOrder,
    Product,
    ProductDetailView,
    QuantityAction,
    QuantityRequest,
    QuantityResult,
)

logging.basicConfig(
    stream=sys.stdout,
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("storefront")

app = FastAPI(title="Storefront Views API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -----------------
# Dependencies
# -----------------
def get_product_service() -> ProductService:
    return MongoProductService(database.db)


def get_category_service() -> CategoryService:
    return MongoCategoryService(database.db)


def get_order_service() -> OrderService:
    return MongoOrderService(database.db)


def get_cart_service() -> CartService:
    return MongoCartService(database.db)


def get_product_detail_aggregator(
    products: ProductService = Depends(get_product_service),
    categories: CategoryService = Depends(get_category_service),
) -> ProductDetailAggregator:
    return ProductDetailAggregator(products, categories)


def get_order_history_aggregator(
    orders: OrderService = Depends(get_order_service),
    products: ProductService = Depends(get_product_service),
) -> OrderHistoryAggregator:
    return OrderHistoryAggregator(orders, products)


def require_user(x_user_id: Optional[str] = Header(default=None)) -> str:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="You need to be logged in")
    return x_user_id


async def load_product(products: ProductService, product_id: str) -> Product:
    try:
        product = await products.get_product_by_id(product_id)
    except CollaboratorUnavailable as e:
        logger.error("product lookup failed for %s: %s", product_id, e)
        raise HTTPException(status_code=503, detail="Product service unavailable")
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@app.get("/")
def root():
    return {"name": "Storefront Views API", "status": "ok"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": "❌ Not Set",
        "collections": []
    }
    try:
        if database.db is not None:
            response["database"] = "✅ Connected"
            response["database_name"] = database.db.name
            response["collections"] = database.db.list_collection_names()
    except Exception as e:
        response["database"] = f"⚠️ {str(e)[:80]}"
    return response


# -----------------
# Product detail
# -----------------
@app.get("/api/products/{product_id}/detail", response_model=ProductDetailView)
async def get_product_detail(
    product_id: str,
    aggregator: ProductDetailAggregator = Depends(get_product_detail_aggregator),
):
    try:
        return await aggregator.load_product_detail(product_id)
    except NotFound:
        raise HTTPException(status_code=404, detail="Product not found")
    except CollaboratorUnavailable as e:
        logger.error("product detail %s failed: %s", product_id, e)
        raise HTTPException(status_code=503, detail="Error loading product details")


@app.post("/api/products/{product_id}/quantity", response_model=QuantityResult)
async def change_quantity(
    product_id: str,
    payload: QuantityRequest,
    products: ProductService = Depends(get_product_service),
):
    if payload.action == QuantityAction.SET and payload.value is None:
        raise HTTPException(status_code=422, detail="value is required for action 'set'")
    product = await load_product(products, product_id)
    try:
        controller = QuantityController.for_product(product, payload.quantity)
    except OutOfStock as e:
        raise HTTPException(status_code=409, detail=e.message)
    return controller.apply(payload.action, payload.value)


# -----------------
# Order history
# -----------------
@app.get("/api/users/me/orders", response_model=List[EnrichedOrder])
async def get_order_history(
    user_id: str = Depends(require_user),
    aggregator: OrderHistoryAggregator = Depends(get_order_history_aggregator),
):
    try:
        return await aggregator.load_order_history(user_id)
    except CollaboratorUnavailable as e:
        logger.error("order history for %s failed: %s", user_id, e)
        raise HTTPException(status_code=503, detail="Error loading orders")


# -----------------
# Cart
# -----------------
@app.post("/api/cart/items", response_model=CartMutationResult)
async def add_cart_item(
    payload: CartItemRequest,
    user_id: str = Depends(require_user),
    products: ProductService = Depends(get_product_service),
    cart: CartService = Depends(get_cart_service),
):
    product = await load_product(products, payload.product_id)
    try:
        if payload.quick_add:
            result = await quick_add_to_cart(cart, user_id, product)
        else:
            result = await add_to_cart(cart, user_id, product, payload.quantity)
    except ConstraintViolation as e:
        raise HTTPException(status_code=409, detail=e.message)
    if not result.success:
        raise HTTPException(status_code=502, detail=result.reason)
    return result


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
