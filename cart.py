"""
Add-to-cart command.

The requested quantity is checked against current stock before the cart
service is called. The cart service is called at most once per command; a
failure comes back as an unsuccessful CartMutationResult, never a retry.
"""
import logging
from typing import Optional

from collaborators import CartService
from errors import CollaboratorUnavailable, ConstraintViolation
from quantity import QuantityController
from schemas import CartMutationResult, Product

logger = logging.getLogger(__name__)


def added_message(quantity: int) -> str:
    return f"Added {quantity} {'item' if quantity == 1 else 'items'} to cart"


async def add_to_cart(cart_service: CartService, user_id: str, product: Product, quantity: int,
                      message: Optional[str] = None) -> CartMutationResult:
    controller = QuantityController.for_product(product)
    checked = controller.set_direct(quantity)
    if not checked.accepted:
        raise ConstraintViolation(checked.signal, checked.message or "Quantity must be at least 1")

    try:
        await cart_service.add_to_cart(user_id, product.id, quantity)
    except CollaboratorUnavailable as e:
        logger.error("add to cart failed user=%s product=%s qty=%s: %s", user_id, product.id, quantity, e)
        return CartMutationResult(success=False, product_id=product.id, quantity=quantity, reason=str(e))

    logger.info("added to cart user=%s product=%s qty=%s", user_id, product.id, quantity)
    return CartMutationResult(
        success=True,
        product_id=product.id,
        quantity=quantity,
        message=message or added_message(quantity),
    )


async def quick_add_to_cart(cart_service: CartService, user_id: str, product: Product) -> CartMutationResult:
    """One-click add of a single unit, as offered on related-product cards"""
    return await add_to_cart(cart_service, user_id, product, 1, message=f"Added {product.title} to cart")
