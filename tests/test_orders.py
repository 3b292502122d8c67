import unittest
from datetime import datetime, timedelta

from store.models import Address, CartItem, Customer
from support import make_api
from utils.errors import NotFoundError
from utils.pure import tracking_code_arg

T0 = datetime(2025, 11, 1, 12, 0, 0)

CUSTOMER = Customer(name="Ana", email="ana@x.com", phone="11911112222")
ADDRESS = Address(street="Rua A 1", city="São Paulo", state="SP", zip="01000-000")


class OrdersTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.api, self.gateway = make_api()
        session = await self.api.register("ana", "ana@x.com", "Ana", "p1")
        self.uid = session.user.uid
        self.shirt = await self.api.create_product("Shirt", price=1000, stock_count=5, active=True)
        self.socks = await self.api.create_product("Socks", price=500, stock_count=9, active=True)

    async def _order(self, when=T0, customer=CUSTOMER, items=None):
        if items is None:
            items = [CartItem(self.shirt.pid, 2), CartItem(self.socks.pid, 1)]
        return await self.api.create_order(self.uid, customer, ADDRESS, items, "PIX", when=when)

    # ---------- Checkout ----------

    async def test_total_and_snapshot(self):
        order = await self._order()
        self.assertEqual(order.total, 2500)
        self.assertEqual(order.status, "PENDING")
        self.assertEqual(order.created_at, T0)
        self.assertTrue(order.ono.startswith("ord_"))
        self.assertEqual([(l.name, l.qty, l.uprice) for l in order.lines],
                         [("Shirt", 2, 1000), ("Socks", 1, 500)])

        await self.api.update_product(self.shirt.pid, price=9999, name="Fancy Shirt")
        stored = await self.api.get_order(order.ono)
        self.assertEqual(stored.lines[0].uprice, 1000)
        self.assertEqual(stored.lines[0].name, "Shirt")
        self.assertEqual(stored.total, 2500)

    async def test_stock_is_not_decremented(self):
        await self._order()
        self.assertEqual((await self.api.get_product(self.shirt.pid)).stock_count, 5)

    async def test_new_order_notifies_customer_and_admin(self):
        order = await self._order()
        settings = self.api.settings

        self.assertEqual(len(self.gateway.sent), 4)
        self.assertEqual([d.channel for d in self.gateway.to(CUSTOMER.phone)], ["phone"])
        self.assertEqual([d.channel for d in self.gateway.to(CUSTOMER.email)], ["email"])
        self.assertEqual(len(self.gateway.to(settings.admin_alert_phone)), 1)
        self.assertEqual(len(self.gateway.to(settings.admin_alert_email)), 1)
        self.assertIn(order.ono, self.gateway.to(CUSTOMER.email)[0].body)
        self.assertIn("R$ 25,00", self.gateway.to(CUSTOMER.email)[0].body)

    async def test_admin_recipients_come_from_settings(self):
        self.api, self.gateway = make_api(
            admin_alert_phone="5500000000", admin_alert_email="boss@shop.test"
        )
        await self.api.create_order(
            2, CUSTOMER, ADDRESS, [CartItem(pid=4, qty=1)], "CREDIT_CARD", when=T0
        )
        self.assertEqual(len(self.gateway.to("5500000000")), 1)
        self.assertEqual(len(self.gateway.to("boss@shop.test")), 1)

    async def test_customer_without_phone_only_gets_email(self):
        await self._order(customer=Customer(name="Ana", email="ana@x.com"))
        self.assertEqual(len(self.gateway.sent), 3)
        self.assertEqual(len(self.gateway.to("ana@x.com")), 1)

    async def test_same_millisecond_orders_get_distinct_ids(self):
        a = await self._order()
        b = await self._order()
        self.assertNotEqual(a.ono, b.ono)
        self.assertEqual(b.ono, a.ono + "-2")

    async def test_invalid_checkouts(self):
        with self.assertRaises(ValueError):
            await self._order(items=[])
        with self.assertRaises(ValueError):
            await self._order(items=[CartItem(self.shirt.pid, 0)])
        with self.assertRaises(NotFoundError):
            await self._order(items=[CartItem(999, 1)])
        with self.assertRaises(ValueError):
            await self.api.create_order(
                self.uid, CUSTOMER, ADDRESS, [CartItem(self.shirt.pid, 1)], "CASH"
            )

        await self.api.set_product_active(self.socks.pid, False)
        with self.assertRaises(NotFoundError):
            await self._order(items=[CartItem(self.socks.pid, 1)])

        self.assertEqual(await self.api.list_orders_for_user(self.uid), [])
        self.assertEqual(self.gateway.sent, [])

    # ---------- Status transitions ----------

    async def test_delivered_twice_notifies_twice(self):
        order = await self._order()
        self.gateway.clear()

        first = await self.api.update_status(order.ono, "DELIVERED")
        second = await self.api.update_status(order.ono, "DELIVERED")
        self.assertEqual(first.status, "DELIVERED")
        self.assertEqual(second.status, "DELIVERED")

        to_email = self.gateway.to(CUSTOMER.email)
        to_phone = self.gateway.to(CUSTOMER.phone)
        self.assertEqual(len(to_email), 2)
        self.assertEqual(len(to_phone), 2)
        self.assertTrue(all("delivered" in d.body for d in to_email + to_phone))

    async def test_other_statuses_send_generic_message(self):
        order = await self._order()
        self.gateway.clear()
        await self.api.update_status(order.ono, "PAID")
        (email,) = self.gateway.to(CUSTOMER.email)
        self.assertIn("status changed to PAID", email.body)
        self.assertEqual(email.subject, "Order status update")

    async def test_transitions_are_not_ordered(self):
        order = await self._order()
        await self.api.update_status(order.ono, "DELIVERED")
        back = await self.api.update_status(order.ono, "PENDING")
        self.assertEqual(back.status, "PENDING")

    async def test_tracking_code_kept_when_omitted(self):
        order = await self._order()
        shipped = await self.api.update_status(order.ono, "SHIPPED", "GBR-1")
        self.assertEqual(shipped.tracking_code, "GBR-1")
        self.assertIn("GBR-1", self.gateway.to(CUSTOMER.email)[-1].body)

        delivered = await self.api.update_status(order.ono, "DELIVERED")
        self.assertEqual(delivered.tracking_code, "GBR-1")

        cleared = await self.api.update_status(order.ono, "DELIVERED", "")
        self.assertIsNone(cleared.tracking_code)

    async def test_tracking_field_and_clear_switch(self):
        order = await self._order()
        await self.api.update_status(order.ono, "SHIPPED", tracking_code_arg(" GBR-7 "))
        kept = await self.api.update_status(order.ono, "SHIPPED", tracking_code_arg(""))
        self.assertEqual(kept.tracking_code, "GBR-7")

        wiped = await self.api.update_status(
            order.ono, "SHIPPED", tracking_code_arg("GBR-8", clear=True)
        )
        self.assertIsNone(wiped.tracking_code)
        self.assertNotIn("Tracking code", self.gateway.to(CUSTOMER.email)[-1].body)

    async def test_update_errors(self):
        with self.assertRaises(NotFoundError):
            await self.api.update_status("ord_nope", "PAID")
        order = await self._order()
        with self.assertRaises(ValueError):
            await self.api.update_status(order.ono, "LOST")
        self.assertEqual((await self.api.get_order(order.ono)).status, "PENDING")

    # ---------- Reads ----------

    async def test_listing(self):
        older = await self._order(when=T0)
        newer = await self._order(when=T0 + timedelta(hours=1))

        mine = await self.api.list_orders_for_user(self.uid)
        self.assertEqual([o.ono for o in mine], [newer.ono, older.ono])

        everything = await self.api.list_orders()
        self.assertEqual(everything[0].ono, newer.ono)
        self.assertIn("ord_1001", [o.ono for o in everything])

        self.assertIsNone(await self.api.get_order("ord_nope"))
