"""
Schemas for the storefront view layer

Records read from the product, category and order collections are validated
into these models at the collaborator boundary. Fields are snake_case in Python
and camelCase on the wire (e.g., category_id -> "categoryId"); both spellings
are accepted on input.

View models (ProductDetailView, EnrichedOrder) are derived per request and
never persisted.
"""
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

CENTS = Decimal("0.01")


class StoreModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -----------------
# Catalog
# -----------------
class Category(StoreModel):
    id: str
    slug: str = Field(..., description="URL slug (e.g., 'smartphones')")
    name: str = Field(..., description="Display name")


class Product(StoreModel):
    """Catalog product as stored by the product service"""
    id: str
    title: str
    description: Optional[str] = None
    brand: Optional[str] = None
    price: Decimal = Field(..., gt=0, description="Current selling price")
    discount_percentage: float = Field(0, ge=0, le=100)
    rating: float = Field(0, ge=0)
    stock: int = Field(0, ge=0, description="Units in stock")
    images: List[str] = Field(..., min_length=1, description="Image URLs, display order")
    thumbnail: Optional[str] = None
    specifications: Dict[str, Union[str, int, float]] = Field(
        default_factory=dict, description="Attribute name -> display value, insertion ordered"
    )
    features: List[str] = Field(default_factory=list)
    category_id: Optional[str] = None

    @computed_field(alias="listPrice")
    @property
    def list_price(self) -> Optional[Decimal]:
        """Pre-discount price, derived from the stored discount."""
        if not 0 < self.discount_percentage < 100:
            return None
        factor = 1 - Decimal(str(self.discount_percentage)) / 100
        return (self.price / factor).quantize(CENTS, rounding=ROUND_HALF_UP)


class SpecificationRow(StoreModel):
    label: str
    value: Optional[Union[str, int, float]] = None


class ProductDetailView(StoreModel):
    product: Product
    category: Optional[Category] = None
    related_products: List[Product] = Field(default_factory=list, max_length=4)
    specification_rows: List[SpecificationRow] = Field(default_factory=list)


# -----------------
# Orders
# -----------------
class OrderStatus(str, Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentStatus(str, Enum):
    PAID = "Paid"
    UNPAID = "Unpaid"
    REFUNDED = "Refunded"
    FAILED = "Failed"


class ShippingAddress(StoreModel):
    """Snapshot taken at order time; never updated afterwards."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    name: str
    street: str
    city: str
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: str


class OrderItem(StoreModel):
    product_id: str
    quantity: int = Field(..., ge=1)


class Order(StoreModel):
    id: str
    user_id: str
    items: List[OrderItem] = Field(default_factory=list)
    order_status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    total_amount: Decimal = Field(..., ge=0, description="Authoritative total charged")
    shipping_address: ShippingAddress
    created_at: datetime


class Resolution(str, Enum):
    RESOLVED = "resolved"
    MISSING = "missing"
    UNAVAILABLE = "unavailable"


class EnrichedLineItem(StoreModel):
    product_id: str
    product: Optional[Product] = None
    quantity: int = Field(..., ge=1)
    resolution: Resolution = Resolution.RESOLVED

    @computed_field
    @property
    def subtotal(self) -> Optional[Decimal]:
        if self.product is None:
            return None
        return self.product.price * self.quantity


class EnrichedOrder(Order):
    line_items: List[EnrichedLineItem]

    @computed_field(alias="unavailableCount")
    @property
    def unavailable_count(self) -> int:
        return sum(1 for item in self.line_items if item.product is None)


# -----------------
# Quantity and cart
# -----------------
class QuantityAction(str, Enum):
    INCREMENT = "increment"
    DECREMENT = "decrement"
    SET = "set"


class QuantitySignal(str, Enum):
    NONE = "none"
    AT_CAPACITY = "at_capacity"
    AT_MINIMUM = "at_minimum"
    BELOW_MINIMUM = "below_minimum"
    INSUFFICIENT_STOCK = "insufficient_stock"


class QuantityResult(StoreModel):
    quantity: int
    accepted: bool
    signal: QuantitySignal = QuantitySignal.NONE
    message: Optional[str] = None
    can_increment: bool
    can_decrement: bool


class QuantityRequest(StoreModel):
    quantity: int = Field(1, description="Quantity currently selected in the view")
    action: QuantityAction
    value: Optional[int] = Field(None, description="Requested quantity for action 'set'")


class CartItemRequest(StoreModel):
    product_id: str
    quantity: int = Field(1, ge=1)
    quick_add: bool = Field(False, description="One-click add of a single unit from a related-product card")


class CartMutationResult(StoreModel):
    success: bool
    product_id: str
    quantity: int
    message: Optional[str] = None
    reason: Optional[str] = None
