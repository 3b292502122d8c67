from textual import events, on
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.validation import Number
from textual.widgets import Button, Input, Label, MarkdownViewer

from store.models import Product
from utils.pure import format_money, generate_markdown_table

LOW_STOCK = 5


def render_product_detail(prod: Product, symbol: str) -> str:
    """Markdown for the detail pane: description first, facts below."""
    rows = [
        ["Price", format_money(prod.price, symbol)],
        ["In stock", prod.stock_count],
    ]
    if prod.image:
        rows.append(["Image", prod.image])
    md = f"### {prod.name}\n\n{prod.descr or '_No description._'}\n\n"
    md += generate_markdown_table(["Detail", "Value"], rows, ["l", "l"])
    if 0 < prod.stock_count < LOW_STOCK:
        md += f"\n\n**Only {prod.stock_count} left!**"
    return md


class ProdDetailModal(ModalScreen[bool]):
    """
    Product detail, quantity picker and favorite toggle.
    Dismisses with True if the cart changed.
    """

    order_qty = reactive(1)

    def __init__(self, prod: Product, symbol: str = "R$") -> None:
        super().__init__()
        self._prod = prod
        self._symbol = symbol

    def compose(self) -> ComposeResult:
        with Horizontal(id="hort-prod-detail"):
            yield MarkdownViewer("", show_table_of_contents=False)
            with Vertical():
                yield Label("Order Quantity")
                with Horizontal():
                    yield Button("-", id="btn-sub-qty")
                    yield Input(
                        value="1",
                        id="input-order-qty",
                        type="integer",
                        validators=[Number(minimum=1)],
                    )
                    yield Button("+", id="btn-add-qty")
                yield Button("", id="btn-favorite")
                with Horizontal():
                    yield Button("Go Back", id="btn-quit")
                    yield Button("Add to Cart", id="btn-addcart", variant="primary")

    async def on_mount(self) -> None:
        await self.query_one(MarkdownViewer).document.update(
            render_product_detail(self._prod, self._symbol)
        )
        self._render_favorite()

        in_cart = self.app.state.cart.get(self._prod.pid)
        if in_cart:
            self.order_qty = in_cart
            self.query_one("#btn-addcart", Button).label = "Update Cart"

        self.query_one("#input-order-qty").focus()

    def _render_favorite(self) -> None:
        btn = self.query_one("#btn-favorite", Button)
        if self.app.state.is_favorite(self._prod.pid):
            btn.label = "♥ Favorited"
            btn.variant = "warning"
        else:
            btn.label = "♡ Add to favorites"
            btn.variant = "default"

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss(False)

    def on_input_changed(self, message: Input.Changed) -> None:
        if (
            message.input.id == "input-order-qty"
            and message.input.is_valid
            and self.focused == message.input
        ):
            self.order_qty = int(message.value)

    def watch_order_qty(self, qty: int) -> None:
        self.query_one("#btn-sub-qty", Button).disabled = qty <= 1
        self.query_one("#input-order-qty", Input).value = str(qty)

    @on(Button.Pressed, "#btn-add-qty")
    def handle_add_qty(self) -> None:
        self.order_qty += 1

    @on(Button.Pressed, "#btn-sub-qty")
    def handle_sub_qty(self) -> None:
        self.order_qty = max(1, self.order_qty - 1)

    @on(Button.Pressed, "#btn-favorite")
    def handle_favorite(self) -> None:
        starred = self.app.state.toggle_favorite(self._prod.pid)
        self.notify("Added to favorites." if starred else "Removed from favorites.")
        self._render_favorite()

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self) -> None:
        self.dismiss(False)

    @on(Button.Pressed, "#btn-addcart")
    def handle_addcart(self) -> None:
        self.app.state.set_cart_qty(self._prod.pid, self.order_qty)
        self.app.notify(f"{self._prod.name} x{self.order_qty} in cart.")
        self.dismiss(True)
