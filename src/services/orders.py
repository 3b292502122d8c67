# order lifecycle: checkout snapshot, free status transitions, notifications
from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import List, Optional, Sequence

from services.notifications import OrderNotifier
from store import models
from store.database import Database
from utils.errors import NotFoundError
from utils.logger import get_logger

_logger = get_logger(__name__)


def _newest_first(orders: List[models.Order]) -> List[models.Order]:
    return sorted(orders, key=lambda o: o.created_at, reverse=True)


class OrderService:
    def __init__(self, db: Database, notifier: OrderNotifier) -> None:
        self.db = db
        self.notifier = notifier

    # ---------------------------
    # Checkout
    # ---------------------------

    async def create_order(
        self,
        uid: int,
        customer: models.Customer,
        address: models.Address,
        items: Sequence[models.CartItem],
        payment_method: models.PaymentMethod,
        when: Optional[datetime] = None,
    ) -> models.Order:
        """
        Place an order for the cart ``items``.

        Names and prices are copied from the catalog now and never follow later
        product edits. Stock is left untouched.
        """
        if not items:
            raise ValueError("Cannot place an order with an empty cart.")
        if payment_method not in models.PAYMENT_METHODS:
            raise ValueError(f"Unknown payment method: {payment_method}")
        if any(item.qty <= 0 for item in items):
            raise ValueError("Quantities must be positive.")
        when = when or datetime.now()

        async with self.db.connect() as conn:
            lines = []
            for item in items:
                prod = conn.products.get(item.pid)
                if prod is None or not prod.active:
                    raise NotFoundError(f"Product {item.pid} is not available.")
                lines.append(
                    models.OrderLine(
                        pid=prod.pid, name=prod.name, qty=item.qty, uprice=prod.price
                    )
                )

            # pick unique order number
            base = f"ord_{int(when.timestamp() * 1000)}"
            ono, n = base, 1
            while ono in conn.orders:
                n += 1
                ono = f"{base}-{n}"

            order = models.Order(
                ono=ono,
                uid=uid,
                customer=customer,
                address=address,
                lines=tuple(lines),
                total=sum(line.line_total for line in lines),
                status="PENDING",
                payment_method=payment_method,
                created_at=when,
            )
            conn.orders.put(ono, order)
            site = conn.settings

        _logger.info(f"Order {order.ono} placed by user {uid}, total {order.total}")
        await self.notifier.notify_new_order(order, site)
        return order

    # ---------------------------
    # Status transitions
    # ---------------------------

    async def update_status(
        self,
        ono: str,
        status: models.OrderStatus,
        tracking_code: Optional[str] = None,
    ) -> models.Order:
        """
        Set any status from any status. ``tracking_code=None`` keeps the
        current code, a string (even empty) replaces it. Every call notifies
        the customer, repeats included.
        """
        if status not in models.ORDER_STATUSES:
            raise ValueError(f"Unknown order status: {status}")

        async with self.db.connect() as conn:
            order = conn.orders.get(ono)
            if order is None:
                raise NotFoundError("Order not found.")
            changes = {"status": status}
            if tracking_code is not None:
                changes["tracking_code"] = tracking_code.strip() or None
            updated = conn.orders.put(ono, replace(order, **changes))

        _logger.info(f"Order {ono}: {order.status} -> {updated.status}")
        await self.notifier.notify_status_change(updated)
        return updated

    # ---------------------------
    # Reads
    # ---------------------------

    async def list_orders(self) -> List[models.Order]:
        async with self.db.connect() as conn:
            return _newest_first(conn.orders.all())

    async def list_orders_for_user(self, uid: int) -> List[models.Order]:
        async with self.db.connect() as conn:
            return _newest_first(conn.orders.filter(lambda o: o.uid == uid))

    async def get_order(self, ono: str) -> Optional[models.Order]:
        async with self.db.connect() as conn:
            return conn.orders.get(ono)
