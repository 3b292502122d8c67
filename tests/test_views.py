import unittest

from store.models import Product
from store.seed import DEMO_PRODUCTS
from views.modal_prod_detail import render_product_detail
from views.scr_account import render_favorites


class ProductDetailTestCase(unittest.TestCase):
    def test_shows_description_image_and_price(self):
        prod = Product(
            pid=9,
            name="Bolsa Aurora",
            price=45000,
            image="https://img.example/bolsa.jpg",
            descr="Couro legitimo.",
            stock_count=12,
        )
        md = render_product_detail(prod, "R$")
        self.assertTrue(md.startswith("### Bolsa Aurora"))
        self.assertIn("Couro legitimo.", md)
        self.assertIn("https://img.example/bolsa.jpg", md)
        self.assertIn("R$ 450,00", md)
        self.assertNotIn("left!", md)

    def test_low_stock_and_missing_description(self):
        prod = Product(pid=9, name="Hat", price=100, stock_count=2)
        md = render_product_detail(prod, "R$")
        self.assertIn("_No description._", md)
        self.assertIn("Only 2 left!", md)
        self.assertNotIn("Image", md)

        sold_out = render_product_detail(Product(pid=9, name="Hat", price=100), "R$")
        self.assertNotIn("left!", sold_out)


class FavoritesTestCase(unittest.TestCase):
    def test_render(self):
        self.assertIn("No favorites yet", render_favorites([], "R$"))

        md = render_favorites(DEMO_PRODUCTS[:2], "R$")
        self.assertIn(DEMO_PRODUCTS[0].name, md)
        self.assertIn(DEMO_PRODUCTS[1].name, md)
        self.assertIn("R$ 1.299,00", md)
