import unittest
from datetime import datetime

from utils.pure import (
    format_money,
    format_when,
    generate_markdown_table,
    parse_money_input,
    tracking_code_arg,
)
from utils.state import GlobalState
from store.models import CartItem, PublicUser, Session


class FormatMoneyTestCase(unittest.TestCase):
    def test_format(self):
        self.assertEqual(format_money(129900), "R$ 1.299,00")
        self.assertEqual(format_money(0), "R$ 0,00")
        self.assertEqual(format_money(5), "R$ 0,05")
        self.assertEqual(format_money(123456789), "R$ 1.234.567,89")
        self.assertEqual(format_money(-2500), "-R$ 25,00")
        self.assertEqual(format_money(1000, symbol="US$"), "US$ 10,00")

    def test_parse_input(self):
        self.assertEqual(parse_money_input("1299"), 129900)
        self.assertEqual(parse_money_input("1299.90"), 129990)
        self.assertEqual(parse_money_input(" 1299,9 "), 129990)
        self.assertEqual(parse_money_input("0,05"), 5)
        for bad in ("", "abc", "-5", "1.234,56", "1,999"):
            with self.assertRaises(ValueError, msg=bad):
                parse_money_input(bad)

    def test_format_when(self):
        self.assertEqual(format_when(datetime(2023, 10, 15, 9, 5)), "2023-10-15 09:05")


class TrackingCodeArgTestCase(unittest.TestCase):
    def test_mapping(self):
        self.assertIsNone(tracking_code_arg(""))
        self.assertIsNone(tracking_code_arg("   "))
        self.assertEqual(tracking_code_arg(" GBR-9 "), "GBR-9")
        self.assertEqual(tracking_code_arg("", clear=True), "")
        self.assertEqual(tracking_code_arg("GBR-9", clear=True), "")


class MarkdownTableTestCase(unittest.TestCase):
    def test_table(self):
        table = generate_markdown_table(["A", "B"], [[1, "x"]], aligns=["l", "r"])
        self.assertEqual(table, "| A | B |\n| :--- | ---: |\n| 1 | x |")

    def test_first_row_as_header(self):
        table = generate_markdown_table(None, [["K", "V"], ["a", 1]])
        self.assertTrue(table.startswith("| K | V |\n| :---: | :---: |"))

    def test_empty_and_mismatch(self):
        self.assertEqual(generate_markdown_table(None, []), "")
        with self.assertRaises(ValueError):
            generate_markdown_table(["A", "B"], [], aligns=["l"])


class GlobalStateTestCase(unittest.TestCase):
    def test_cart(self):
        state = GlobalState()
        state.add_to_cart(1)
        state.add_to_cart(1, 2)
        state.add_to_cart(3, 1)
        self.assertEqual(state.cart_items(), [CartItem(1, 3), CartItem(3, 1)])
        with self.assertRaises(ValueError):
            state.add_to_cart(2, 0)

        state.remove_from_cart(1)
        state.remove_from_cart(99)
        self.assertEqual(state.cart_items(), [CartItem(3, 1)])

    def test_session_lifecycle_clears_cart(self):
        state = GlobalState()
        self.assertIsNone(state.user)
        self.assertFalse(state.is_admin)

        admin = PublicUser(uid=1, username="admin", email="a@x.com", name="A", role="ADMIN")
        state.add_to_cart(1)
        state.start_session(Session(token="t", user=admin))
        self.assertTrue(state.is_admin)
        self.assertEqual(state.cart, {})

        state.add_to_cart(2)
        state.end_session()
        self.assertIsNone(state.session)
        self.assertEqual(state.cart, {})

    def test_favorites_toggle_and_survive_logout(self):
        state = GlobalState()
        self.assertTrue(state.toggle_favorite(3))
        self.assertTrue(state.toggle_favorite(1))
        self.assertEqual(state.favorites, [3, 1])
        self.assertTrue(state.is_favorite(1))

        self.assertFalse(state.toggle_favorite(3))
        self.assertFalse(state.is_favorite(3))
        self.assertEqual(state.favorites, [1])

        user = PublicUser(uid=2, username="c", email="c@x.com", name="C", role="USER")
        state.start_session(Session(token="t", user=user))
        state.end_session()
        self.assertEqual(state.favorites, [1])

    def test_set_cart_qty_overwrites(self):
        state = GlobalState()
        state.add_to_cart(4, 2)
        state.set_cart_qty(4, 5)
        self.assertEqual(state.cart_items(), [CartItem(4, 5)])
        with self.assertRaises(ValueError):
            state.set_cart_qty(4, 0)
        self.assertEqual(state.cart, {4: 5})
