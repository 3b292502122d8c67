from __future__ import annotations

from dataclasses import replace
from typing import List, Optional

from store import models
from store.database import Database
from utils.errors import NotFoundError
from utils.logger import get_logger

_logger = get_logger(__name__)

EDITABLE_FIELDS = {"name", "price", "image", "descr", "stock_count", "active"}


def _validate(prod: models.Product) -> None:
    if not prod.name.strip():
        raise ValueError("Product name cannot be empty.")
    if prod.price < 0:
        raise ValueError("Price cannot be negative.")
    if prod.stock_count < 0:
        raise ValueError("Stock cannot be negative.")


class CatalogService:
    """Products, the site settings singleton and the admin dashboard numbers."""

    def __init__(self, db: Database, recent_orders: int = 10) -> None:
        self.db = db
        self.recent_orders = recent_orders

    # ---------------------------
    # Products
    # ---------------------------

    async def list_products(self, include_inactive: bool = False) -> List[models.Product]:
        """Storefront listing; admins pass include_inactive=True."""
        async with self.db.connect() as conn:
            prods = conn.products.all()
        if not include_inactive:
            prods = [p for p in prods if p.active]
        return sorted(prods, key=lambda p: p.pid)

    async def get_product(self, pid: int) -> Optional[models.Product]:
        async with self.db.connect() as conn:
            return conn.products.get(pid)

    async def create_product(
        self,
        name: str,
        /,
        price: int = 0,
        image: str = "",
        descr: str = "",
        stock_count: int = 0,
        active: bool = False,
    ) -> models.Product:
        """New products start hidden until an admin activates them."""
        draft = models.Product(
            pid=0,
            name=name,
            price=price,
            image=image,
            descr=descr,
            stock_count=stock_count,
            active=active,
        )
        _validate(draft)
        async with self.db.connect() as conn:
            prod = replace(draft, pid=self.db.next_pid())
            conn.products.put(prod.pid, prod)
        _logger.info(f"Product {prod.pid} created")
        return prod

    async def update_product(self, pid: int, /, **changes) -> models.Product:
        """
        Update only the given fields. Orders already placed keep their copy.
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        async with self.db.connect() as conn:
            prod = conn.products.get(pid)
            if prod is None:
                raise NotFoundError(f"Product {pid} not found.")
            updated = replace(prod, **changes)
            _validate(updated)
            conn.products.put(pid, updated)
        _logger.info(f"Product {pid} updated: {', '.join(sorted(changes))}")
        return updated

    async def set_product_active(self, pid: int, active: bool) -> models.Product:
        return await self.update_product(pid, active=active)

    async def delete_product(self, pid: int) -> None:
        async with self.db.connect() as conn:
            if not conn.products.delete(pid):
                raise NotFoundError(f"Product {pid} not found.")
        _logger.info(f"Product {pid} deleted")

    # ---------------------------
    # Site settings
    # ---------------------------

    async def get_settings(self) -> models.SiteSettings:
        async with self.db.connect() as conn:
            return conn.settings

    async def save_settings(self, settings: models.SiteSettings) -> models.SiteSettings:
        if not settings.site_name.strip():
            raise ValueError("Site name cannot be empty.")
        async with self.db.connect() as conn:
            conn.settings = settings
        _logger.info("Site settings saved")
        return settings

    # ---------------------------
    # Admin dashboard
    # ---------------------------

    async def get_stats(self, recent: Optional[int] = None) -> models.AdminStats:
        """Recomputed on every call."""
        recent = self.recent_orders if recent is None else recent
        async with self.db.connect() as conn:
            orders = sorted(conn.orders.all(), key=lambda o: o.created_at, reverse=True)
            total_users = len(conn.users)
        return models.AdminStats(
            total_users=total_users,
            total_orders=len(orders),
            total_revenue=sum(o.total for o in orders),
            recent_orders=tuple(orders[: max(recent, 0)]),
        )
