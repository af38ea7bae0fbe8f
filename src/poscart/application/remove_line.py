"""Application service: Remove Line use case."""

from __future__ import annotations

from poscart.domain.model.cart import Cart, CartLine


class RemoveLineHandler:

    def __init__(self, cart: Cart) -> None:
        self._cart = cart

    def handle(self, line_id: str) -> CartLine:
        """Remove a line unconditionally and return it."""
        return self._cart.remove(line_id)
