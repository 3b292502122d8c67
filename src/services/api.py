# the single entry point the UI talks to
from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from services import security
from services.accounts import AccountService
from services.catalog import CatalogService
from services.notifications import LoggingGateway, NotificationGateway, OrderNotifier
from services.orders import OrderService
from services.recovery import RecoveryService
from services.throttle import LoginThrottle
from store import models
from store.database import Database
from store.seed import seeded_database
from utils.config import Settings, get_settings
from utils.logger import get_logger

_logger = get_logger(__name__)


class StorefrontApi:
    """
    Facade over the account, recovery, order and catalog services.

    Every method is a coroutine. Expected failures raise a subclass of
    utils.errors.StorefrontError; bad arguments raise ValueError.
    """

    def __init__(
        self,
        db: Database,
        gateway: Optional[NotificationGateway] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.db = db
        self.gateway = gateway or LoggingGateway()
        self.throttle = LoginThrottle(
            max_failures=self.settings.login_max_failures,
            window=timedelta(minutes=self.settings.login_lockout_minutes),
        )
        self.accounts = AccountService(db, self.throttle, self.settings)
        self.recovery = RecoveryService(db, self.gateway, self.settings)
        self.orders = OrderService(db, OrderNotifier(self.gateway, self.settings))
        self.catalog = CatalogService(db, recent_orders=self.settings.recent_orders)

    @classmethod
    def create(
        cls,
        settings: Optional[Settings] = None,
        gateway: Optional[NotificationGateway] = None,
    ) -> "StorefrontApi":
        """Build an api over a fresh in-memory store, seeded unless disabled."""
        settings = settings or get_settings()
        if settings.seed_demo_data:
            db = seeded_database(security.hash_password, latency=settings.latency)
        else:
            db = Database(latency=settings.latency)
        _logger.debug(f"Storefront api over {db.describe()}, latency {settings.latency}s")
        return cls(db, gateway=gateway, settings=settings)

    # ---------------------------
    # Auth
    # ---------------------------

    async def login(
        self, identifier: str, password: str, when: Optional[datetime] = None
    ) -> models.Session:
        return await self.accounts.login(identifier, password, when)

    async def register(
        self,
        username: str,
        email: str,
        name: str,
        password: str,
        phone: Optional[str] = None,
    ) -> models.Session:
        return await self.accounts.register(username, email, name, password, phone)

    async def current_user(self, token: str) -> models.PublicUser:
        return await self.accounts.current_user(token)

    async def change_password(self, uid: int, old_password: str, new_password: str) -> None:
        await self.accounts.change_password(uid, old_password, new_password)

    async def request_recovery(
        self,
        identifier: str,
        channel: models.Channel,
        when: Optional[datetime] = None,
    ) -> bool:
        return await self.recovery.request_recovery(identifier, channel, when)

    async def redeem_recovery(
        self, code: str, new_password: str, when: Optional[datetime] = None
    ) -> None:
        await self.recovery.redeem_recovery(code, new_password, when)

    # ---------------------------
    # Orders
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
        return await self.orders.create_order(
            uid, customer, address, items, payment_method, when
        )

    async def update_status(
        self,
        ono: str,
        status: models.OrderStatus,
        tracking_code: Optional[str] = None,
    ) -> models.Order:
        return await self.orders.update_status(ono, status, tracking_code)

    async def list_orders(self) -> List[models.Order]:
        return await self.orders.list_orders()

    async def list_orders_for_user(self, uid: int) -> List[models.Order]:
        return await self.orders.list_orders_for_user(uid)

    async def get_order(self, ono: str) -> Optional[models.Order]:
        return await self.orders.get_order(ono)

    # ---------------------------
    # Catalog, settings & stats
    # ---------------------------

    async def list_products(self, include_inactive: bool = False) -> List[models.Product]:
        return await self.catalog.list_products(include_inactive)

    async def get_product(self, pid: int) -> Optional[models.Product]:
        return await self.catalog.get_product(pid)

    async def create_product(self, name: str, /, **fields) -> models.Product:
        return await self.catalog.create_product(name, **fields)

    async def update_product(self, pid: int, /, **changes) -> models.Product:
        return await self.catalog.update_product(pid, **changes)

    async def set_product_active(self, pid: int, active: bool) -> models.Product:
        return await self.catalog.set_product_active(pid, active)

    async def delete_product(self, pid: int) -> None:
        await self.catalog.delete_product(pid)

    async def get_settings(self) -> models.SiteSettings:
        return await self.catalog.get_settings()

    async def save_settings(self, settings: models.SiteSettings) -> models.SiteSettings:
        return await self.catalog.save_settings(settings)

    async def get_stats(self, recent: Optional[int] = None) -> models.AdminStats:
        return await self.catalog.get_stats(recent)
