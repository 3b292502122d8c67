from typing import Dict, Optional, Sequence

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Input, Label, Markdown, MarkdownViewer

from store.models import Order, Product
from utils.errors import StorefrontError
from utils.messages import ModeSwitchedMessage, OrdersChangedMessage
from utils.pure import format_money, format_when, generate_markdown_table
from views.base_screen import BaseScreen


def render_order_detail(order: Optional[Order], symbol: str) -> str:
    """Markdown for one order; shared with the admin dashboard."""
    if order is None:
        return "### Select an order to view its details."

    header = (
        f"### Order #{order.ono}\n"
        f"Date: {format_when(order.created_at)}  \n"
        f"Status: **{order.status}**  \n"
        f"Tracking: {order.tracking_code or '-'}  \n"
        f"Payment: {order.payment_method}  \n"
        f"Customer: {order.customer.name} {order.customer.email} {order.customer.phone}  \n"
        f"Ship To: {order.address.one_line()}\n\n"
    )
    rows = [
        [
            line.name,
            line.qty,
            format_money(line.uprice, symbol),
            format_money(line.line_total, symbol),
        ]
        for line in order.lines
    ]
    table = generate_markdown_table(
        ["Product", "Qty", "Unit Price", "Line Total"], rows, ["l", "r", "r", "r"]
    )
    return header + table + f"\n\n**Grand Total:** {format_money(order.total, symbol)}"


def render_favorites(products: Sequence[Product], symbol: str) -> str:
    if not products:
        return "### Favorites\n\nNo favorites yet. Press f on a product in the shop."
    rows = [[p.name, format_money(p.price, symbol)] for p in products]
    return "### Favorites\n\n" + generate_markdown_table(["Product", "Price"], rows, ["l", "r"])


class AccountScreen(BaseScreen):
    """
    Customers browse their own orders and favorites and change their password.
    """

    BINDINGS = [
        Binding("enter", "noop", "View Order Detail", show=True, key_display="⏎"),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._orders: Dict[str, Order] = {}
        self._symbol = "R$"

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield MarkdownViewer(id="md-order-detail", show_table_of_contents=False)
            yield DataTable(id="table-orders")
            yield Markdown("", id="md-favorites")
            with Horizontal(id="hort-password"):
                with Vertical():
                    yield Label("Current password")
                    yield Input(password=True, id="input-old-pwd")
                with Vertical():
                    yield Label("New password")
                    yield Input(password=True, id="input-new-pwd")
                yield Button("Change password", id="btn-change-pwd", variant="warning")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Order No", "Date", "Status", "Total")
        self.load_orders()

    @on(ModeSwitchedMessage)
    @on(ScreenResume)
    @on(OrdersChangedMessage)
    def handle_refresh(self) -> None:
        self.load_orders()

    @work(exclusive=True, group="orders")
    async def load_orders(self) -> None:
        user = self.app.state.user
        if user is None:
            return
        self._symbol = (await self.app.api.get_settings()).currency_symbol
        orders = await self.app.api.list_orders_for_user(user.uid)
        self._orders = {o.ono: o for o in orders}

        table = self.query_one(DataTable)
        table.clear()
        for o in orders:
            table.add_row(
                o.ono,
                format_when(o.created_at),
                o.status,
                format_money(o.total, self._symbol),
                key=o.ono,
            )
        if not orders:
            self._render_detail(None)

        favorites = []
        for pid in self.app.state.favorites:
            prod = await self.app.api.get_product(pid)
            if prod is not None:
                favorites.append(prod)
        await self.query_one("#md-favorites", Markdown).update(
            render_favorites(favorites, self._symbol)
        )

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self, event: DataTable.RowHighlighted) -> None:
        self._render_detail(self._orders.get(event.row_key.value))

    def _render_detail(self, order: Optional[Order]) -> None:
        md = render_order_detail(order, self._symbol)
        self.query_one("#md-order-detail", MarkdownViewer).document.update(md)

    def action_noop(self) -> None:
        pass

    @on(Button.Pressed, "#btn-change-pwd")
    @work(exclusive=True)
    async def handle_change_password(self) -> None:
        old_input = self.query_one("#input-old-pwd", Input)
        new_input = self.query_one("#input-new-pwd", Input)
        if not old_input.value or not new_input.value:
            self.notify("Fill in both password fields.", severity="error")
            return
        try:
            await self.app.api.change_password(
                self.app.state.user.uid, old_input.value, new_input.value
            )
        except (StorefrontError, ValueError) as err:
            self.report(err)
            old_input.add_class("-invalid")
            old_input.focus()
            return

        old_input.value = ""
        new_input.value = ""
        self.notify("Password changed.")
