from typing import Dict, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.validation import Number
from textual.widgets import Button, DataTable, Input, Label, MarkdownViewer

from store.models import Product
from utils.messages import CartChangedMessage, ModeSwitchedMessage, OrdersChangedMessage
from utils.pure import format_money, generate_markdown_table
from views.base_screen import BaseScreen
from views.modal_checkout import CheckoutModal
from views.modal_prod_detail import ProdDetailModal


class ShopScreen(BaseScreen):
    """
    Active catalog on top, cart summary below. Checkout opens a modal.
    """

    BINDINGS = [
        Binding("a", "add_selected", "Add to Cart", show=True),
        Binding("f", "toggle_favorite", "Favorite", show=True),
        Binding("enter", "noop", "Product Detail", show=True, key_display="⏎"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._products: Dict[int, Product] = {}
        self._selected_pid: Optional[int] = None
        self._symbol = "R$"

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield DataTable(id="table-products")
            with Horizontal(id="hort-add"):
                yield Label("Qty")
                yield Input("1", id="input-qty", type="integer", validators=[Number(minimum=1)])
                yield Button("Add to cart", id="btn-add", variant="primary")
                yield Button("Remove from cart", id="btn-remove")
            yield MarkdownViewer(id="md-cart", show_table_of_contents=False)
            with Horizontal(id="hort-cart-controls"):
                yield Button("Clear cart", id="btn-clear", variant="error")
                yield Button("Checkout", id="btn-checkout", variant="success")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("PID", "Product", "Price", "In Stock")
        table.add_column("Fav", key="fav")
        self.load_products()

    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    def handle_refresh(self) -> None:
        self.load_products()

    @work(exclusive=True, group="products")
    async def load_products(self) -> None:
        site = await self.app.api.get_settings()
        self._symbol = site.currency_symbol
        products = await self.app.api.list_products()
        self._products = {p.pid: p for p in products}

        table = self.query_one(DataTable)
        table.clear()
        for p in products:
            table.add_row(
                p.pid,
                p.name,
                format_money(p.price, self._symbol),
                p.stock_count,
                self._fav_mark(p.pid),
                key=str(p.pid),
            )
        self._render_cart()

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self, event: DataTable.RowHighlighted) -> None:
        self._selected_pid = int(event.row_key.value)

    @on(DataTable.RowSelected)
    @work(exclusive=True, group="detail")
    async def handle_row_selected(self, event: DataTable.RowSelected) -> None:
        prod = self._products.get(int(event.row_key.value))
        if prod is None:
            return
        await self.app.push_screen_wait(ProdDetailModal(prod, self._symbol))
        self._refresh_fav_marks()
        self.post_message(CartChangedMessage())

    def _fav_mark(self, pid: int) -> str:
        return "♥" if self.app.state.is_favorite(pid) else ""

    def _refresh_fav_marks(self) -> None:
        table = self.query_one(DataTable)
        for pid in self._products:
            table.update_cell(str(pid), "fav", self._fav_mark(pid))

    def action_noop(self) -> None:
        pass

    def action_toggle_favorite(self) -> None:
        if self._selected_pid is None:
            self.notify("Select a product first.", severity="warning")
            return
        starred = self.app.state.toggle_favorite(self._selected_pid)
        self.notify("Added to favorites." if starred else "Removed from favorites.")
        self._refresh_fav_marks()

    def action_add_selected(self) -> None:
        self.handle_add()

    @on(Button.Pressed, "#btn-add")
    def handle_add(self) -> None:
        if self._selected_pid is None:
            self.notify("Select a product first.", severity="warning")
            return
        qty_input = self.query_one("#input-qty", Input)
        if not qty_input.value.isdigit() or int(qty_input.value) < 1:
            qty_input.add_class("-invalid")
            qty_input.focus()
            return
        self.app.state.add_to_cart(self._selected_pid, int(qty_input.value))
        self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-remove")
    def handle_remove(self) -> None:
        if self._selected_pid is not None:
            self.app.state.remove_from_cart(self._selected_pid)
            self.post_message(CartChangedMessage())

    @on(Button.Pressed, "#btn-clear")
    def handle_clear(self) -> None:
        self.app.state.cart.clear()
        self.post_message(CartChangedMessage())

    @on(CartChangedMessage)
    def handle_cart_changed(self) -> None:
        self._render_cart()

    def _render_cart(self) -> None:
        rows = []
        subtotal = 0
        for item in self.app.state.cart_items():
            prod = self._products.get(item.pid)
            if prod is None:
                # product went away or was hidden since it was added
                self.app.state.remove_from_cart(item.pid)
                continue
            line_total = prod.price * item.qty
            subtotal += line_total
            rows.append(
                [
                    prod.name,
                    format_money(prod.price, self._symbol),
                    item.qty,
                    format_money(line_total, self._symbol),
                ]
            )

        if not rows:
            md = "### Your cart is empty."
        else:
            md = (
                "### Cart\n\n"
                + generate_markdown_table(
                    ["Product", "Unit Price", "Qty", "Total"], rows, ["l", "r", "c", "r"]
                )
                + f"\n\n**Subtotal:** {format_money(subtotal, self._symbol)}"
            )
        self.query_one("#md-cart", MarkdownViewer).document.update(md)
        self.query_one("#btn-checkout", Button).disabled = not rows

    @on(Button.Pressed, "#btn-checkout")
    @work(exclusive=True)
    async def handle_checkout(self) -> None:
        ono = await self.app.push_screen_wait(CheckoutModal(self._products, self._symbol))
        if ono:
            self.app.state.cart.clear()
            self.post_message(CartChangedMessage())
            self.app.post_message(OrdersChangedMessage())
