from typing import Optional

from errors import OutOfStock
from schemas import QuantityAction, QuantityResult, QuantitySignal


def insufficient_stock_message(stock: int) -> str:
    return f"Sorry, only {stock} items in stock"


class QuantityController:
    """
    Bounded quantity selector for a single product view.

    The selected quantity is always an integer in [1, stock]. Rejected
    transitions leave it unchanged and report a signal; only the stock
    boundary carries a user-facing message. A product with no stock has no
    valid quantity, so construction raises OutOfStock and callers disable
    every quantity and purchase action.
    """

    def __init__(self, stock: int, quantity: int = 1):
        if stock < 1:
            raise OutOfStock(QuantitySignal.INSUFFICIENT_STOCK, "Out of stock")
        self.stock = stock
        # a quantity picked against older stock is pulled back into range
        self.quantity = min(max(quantity, 1), stock)

    @classmethod
    def for_product(cls, product, quantity: int = 1) -> "QuantityController":
        return cls(product.stock, quantity)

    @property
    def can_increment(self) -> bool:
        return self.quantity < self.stock

    @property
    def can_decrement(self) -> bool:
        return self.quantity > 1

    def increment(self) -> QuantityResult:
        if self.quantity >= self.stock:
            return self._reject(QuantitySignal.AT_CAPACITY, insufficient_stock_message(self.stock))
        self.quantity += 1
        return self._accept()

    def decrement(self) -> QuantityResult:
        if self.quantity <= 1:
            # the caller disables the control at 1, so no message
            return self._reject(QuantitySignal.AT_MINIMUM)
        self.quantity -= 1
        return self._accept()

    def set_direct(self, value: int) -> QuantityResult:
        if value < 1:
            return self._reject(QuantitySignal.BELOW_MINIMUM)
        if value > self.stock:
            return self._reject(QuantitySignal.INSUFFICIENT_STOCK, insufficient_stock_message(self.stock))
        self.quantity = value
        return self._accept()

    def apply(self, action: QuantityAction, value: Optional[int] = None) -> QuantityResult:
        if action == QuantityAction.INCREMENT:
            return self.increment()
        if action == QuantityAction.DECREMENT:
            return self.decrement()
        if value is None:
            raise ValueError("value is required for action 'set'")
        return self.set_direct(value)

    def _accept(self) -> QuantityResult:
        return self._result(True, QuantitySignal.NONE, None)

    def _reject(self, signal: QuantitySignal, message: Optional[str] = None) -> QuantityResult:
        return self._result(False, signal, message)

    def _result(self, accepted: bool, signal: QuantitySignal, message: Optional[str]) -> QuantityResult:
        return QuantityResult(
            quantity=self.quantity,
            accepted=accepted,
            signal=signal,
            message=message,
            can_increment=self.can_increment,
            can_decrement=self.can_decrement,
        )
