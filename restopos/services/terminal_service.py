# restopos/services/terminal_service.py
import threading

from ..pos.cart import Cart


class TerminalCarts:
    """One open cart per terminal id. Owned by the app (``app.extensions``)."""

    def __init__(self):
        self._carts: dict[str, Cart] = {}
        self._lock = threading.Lock()

    def cart_for(self, terminal_id: str) -> Cart:
        with self._lock:
            cart = self._carts.get(terminal_id)
            if cart is None:
                cart = self._carts[terminal_id] = Cart()
            return cart

    def reset(self, terminal_id: str) -> Cart:
        with self._lock:
            cart = self._carts[terminal_id] = Cart()
            return cart
