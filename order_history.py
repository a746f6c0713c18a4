import asyncio
import logging
from typing import List

from collaborators import OrderService, ProductService
from schemas import EnrichedLineItem, EnrichedOrder, Order, OrderItem, Resolution

logger = logging.getLogger(__name__)


class OrderHistoryAggregator:
    """
    Builds a user's order history with every line item paired to the
    product's current record.

    Orders and line items keep the sequence the order service returned.
    Line items whose product cannot be resolved stay in place with no
    product; the order's total_amount is passed through untouched.
    """

    def __init__(self, orders: OrderService, products: ProductService):
        self.orders = orders
        self.products = products

    async def load_order_history(self, user_id: str) -> List[EnrichedOrder]:
        orders = await self.orders.get_orders_by_user(user_id)
        return list(await asyncio.gather(*(self.enrich_order(order) for order in orders)))

    async def enrich_order(self, order: Order) -> EnrichedOrder:
        line_items = await asyncio.gather(*(self.enrich_item(item) for item in order.items))
        return EnrichedOrder(**dict(order), line_items=list(line_items))

    async def enrich_item(self, item: OrderItem) -> EnrichedLineItem:
        # Lookup failures stay local to the line item.
        try:
            product = await self.products.get_product_by_id(item.product_id)
        except Exception as e:
            logger.warning("product %s unavailable while enriching order line: %s", item.product_id, e)
            return EnrichedLineItem(product_id=item.product_id, quantity=item.quantity,
                                    resolution=Resolution.UNAVAILABLE)
        if product is None:
            logger.debug("product %s no longer in catalog", item.product_id)
            return EnrichedLineItem(product_id=item.product_id, quantity=item.quantity,
                                    resolution=Resolution.MISSING)
        return EnrichedLineItem(product_id=item.product_id, product=product, quantity=item.quantity)
