from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from store.models import CartItem, PublicUser, Session


@dataclass
class GlobalState:
    """
    Centralized application state shared by screens.

    Fields:
      - session: token + user of whoever is logged in, None when logged out
      - cart: pid -> quantity, kept client side until checkout
      - favorites: pids in the order they were starred; like a browser's
        local storage they outlive logout
    """

    session: Optional[Session] = None
    cart: Dict[int, int] = field(default_factory=dict)
    favorites: List[int] = field(default_factory=list)

    @property
    def user(self) -> Optional[PublicUser]:
        return self.session.user if self.session else None

    @property
    def is_admin(self) -> bool:
        return bool(self.user and self.user.is_admin)

    def start_session(self, session: Session) -> None:
        self.session = session
        self.cart.clear()

    def end_session(self) -> None:
        self.session = None
        self.cart.clear()

    def add_to_cart(self, pid: int, qty: int = 1) -> None:
        if qty <= 0:
            raise ValueError("Quantity must be positive.")
        self.cart[pid] = self.cart.get(pid, 0) + qty

    def set_cart_qty(self, pid: int, qty: int) -> None:
        if qty <= 0:
            raise ValueError("Quantity must be positive.")
        self.cart[pid] = qty

    def remove_from_cart(self, pid: int) -> None:
        self.cart.pop(pid, None)

    def cart_items(self) -> List[CartItem]:
        return [CartItem(pid=pid, qty=qty) for pid, qty in self.cart.items()]

    def toggle_favorite(self, pid: int) -> bool:
        """Star or unstar ``pid``; returns whether it is a favorite now."""
        if pid in self.favorites:
            self.favorites.remove(pid)
            return False
        self.favorites.append(pid)
        return True

    def is_favorite(self, pid: int) -> bool:
        return pid in self.favorites
