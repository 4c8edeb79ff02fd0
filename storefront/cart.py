"""Shopping cart kept in browser storage.

The cart is a JSON array of cart lines under the ``shopping_cart`` key.
Reads fail soft: missing or corrupt data is an empty cart.
"""

import json
from typing import Any, Dict, List, Optional

from storefront.config import CART_STORAGE_KEY
from storefront.logging_config import get_logger
from storefront.models import CartItem
from storefront.notify import Notifier

__all__ = ["CartStore", "clamp_quantity"]

logger = get_logger("cart")

CartLine = Dict[str, Any]


def clamp_quantity(quantity: int, max_quantity: Optional[int], notifier: Optional[Notifier] = None) -> int:
    """Limit a quantity to ``max_quantity``, telling the user when it bites."""
    if not max_quantity or quantity <= max_quantity:
        return quantity
    if notifier is not None:
        notifier.show(f"The maximum quantity for this item is {max_quantity}")
    return max_quantity


class CartStore:
    """Read-modify-write access to the cart in a storage object."""

    def __init__(self, storage, notifier: Optional[Notifier] = None, key: str = CART_STORAGE_KEY):
        self.storage = storage
        self.notifier = notifier or Notifier()
        self.key = key

    def get_cart(self) -> List[CartLine]:
        raw = self.storage.get_item(self.key)
        if not raw:
            return []
        try:
            cart = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Cart data is corrupt, treating as empty: {e}")
            return []
        if not isinstance(cart, list):
            logger.warning("Cart data is not a list, treating as empty")
            return []
        return [line for line in cart if isinstance(line, dict)]

    def save_cart(self, cart: List[CartLine]) -> None:
        self.storage.set_item(self.key, json.dumps(cart, ensure_ascii=False))

    def clear(self) -> None:
        self.storage.remove_item(self.key)

    def add_item(self, item: CartItem) -> List[CartLine]:
        """Add a line, or increase the quantity of the line with the same name."""
        cart = self.get_cart()
        for line in cart:
            if line.get("item_name") == item.item_name:
                max_quantity = item.max_quantity or line.get("max_quantity")
                line["quantity"] = clamp_quantity(
                    int(line.get("quantity", 0)) + item.quantity, max_quantity, self.notifier
                )
                if max_quantity:
                    line["max_quantity"] = max_quantity
                if item.sku:
                    line["sku"] = item.sku
                break
        else:
            line = item.to_dict()
            line["quantity"] = clamp_quantity(item.quantity, item.max_quantity, self.notifier)
            cart.append(line)

        self.save_cart(cart)
        return cart

    def remove_item(self, item_name: str) -> List[CartLine]:
        cart = [line for line in self.get_cart() if line.get("item_name") != item_name]
        self.save_cart(cart)
        return cart

    def update_item_quantity(self, item_name: str, quantity: int) -> bool:
        """Set a line's quantity; zero or less removes it.

        Returns:
            False when no line has that name
        """
        cart = self.get_cart()
        line = next((l for l in cart if l.get("item_name") == item_name), None)
        if line is None:
            return False

        if quantity <= 0:
            self.remove_item(item_name)
        else:
            line["quantity"] = clamp_quantity(quantity, line.get("max_quantity"), self.notifier)
            self.save_cart(cart)
        return True

    def item_count(self) -> int:
        return sum(int(line.get("quantity", 0)) for line in self.get_cart())

    def cart_total(self) -> float:
        return sum(
            float(line.get("unit_price", 0)) * int(line.get("quantity", 0))
            for line in self.get_cart()
        )

    def checkout_items(self) -> List[Dict[str, Any]]:
        """SKU and quantity pairs sent to the checkout API."""
        return [
            {"sku": line.get("sku"), "quantity": line.get("quantity")}
            for line in self.get_cart()
        ]

    def has_buy_items(self) -> bool:
        return any(line.get("product_mode") == "buy" for line in self.get_cart())
