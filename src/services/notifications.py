# outbound notification boundary; transports are stubs that only log
from __future__ import annotations

from typing import Optional, Protocol

from store.models import Channel, Order, SiteSettings
from utils.config import Settings
from utils.logger import get_logger
from utils.pure import format_money

_logger = get_logger(__name__)


class NotificationGateway(Protocol):
    async def deliver(
        self,
        channel: Channel,
        recipient: str,
        body: str,
        subject: Optional[str] = None,
    ) -> bool: ...


class LoggingGateway:
    """
    Writes every message to the log instead of sending it.

    Stands in for an SMTP relay (email) and a WhatsApp/SMS api (phone).
    """

    async def deliver(
        self,
        channel: Channel,
        recipient: str,
        body: str,
        subject: Optional[str] = None,
    ) -> bool:
        if channel == "email":
            _logger.info(f"[email] to={recipient} subject={subject!r}: {body}")
        else:
            _logger.info(f"[phone] to={recipient}: {body}")
        return True


class OrderNotifier:
    """Composes the order messages and fans them out through the gateway."""

    def __init__(self, gateway: NotificationGateway, settings: Settings) -> None:
        self.gateway = gateway
        self.settings = settings

    async def _to_customer(self, order: Order, subject: str, email_body: str, phone_body: str):
        if order.customer.phone:
            await self.gateway.deliver("phone", order.customer.phone, phone_body)
        if order.customer.email:
            await self.gateway.deliver("email", order.customer.email, email_body, subject)

    async def notify_new_order(self, order: Order, site: SiteSettings) -> None:
        total = format_money(order.total, site.currency_symbol)
        msg_customer = (
            f"Hello {order.customer.name}! Your order #{order.ono} is confirmed. "
            f"Total: {total}. Status: {order.status}"
        )
        msg_admin = (
            f"NEW SALE! Order #{order.ono} from {order.customer.name}. Amount: {total}."
        )

        await self._to_customer(
            order, f"Order confirmation - {site.site_name}", msg_customer, msg_customer
        )

        # sale alert to the shop owner
        await self.gateway.deliver("phone", self.settings.admin_alert_phone, msg_admin)
        await self.gateway.deliver(
            "email", self.settings.admin_alert_email, msg_admin, "New sale alert"
        )

    async def notify_status_change(self, order: Order) -> None:
        if order.status == "DELIVERED":
            await self._to_customer(
                order,
                "Order delivered",
                f"Your order {order.ono} was delivered successfully.",
                f"Order {order.ono} delivered successfully!",
            )
            return

        msg = f"Order #{order.ono} update: status changed to {order.status}."
        if order.tracking_code:
            msg += f" Tracking code: {order.tracking_code}."
        await self._to_customer(order, "Order status update", msg, msg)
