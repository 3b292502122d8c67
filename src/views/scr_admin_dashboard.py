from typing import Dict, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.widgets import Button, DataTable, Input, Label, Markdown, MarkdownViewer, Select, Switch

from store.models import ORDER_STATUSES, Order
from utils.errors import StorefrontError
from utils.messages import ModeSwitchedMessage, OrdersChangedMessage
from utils.pure import format_money, format_when, tracking_code_arg
from views.base_screen import BaseScreen
from views.scr_account import render_order_detail


class AdminDashboardScreen(BaseScreen):
    """
    Store totals, every order, and the status/tracking controls.
    Statuses can be set in any order, repeats included.
    """

    def __init__(self) -> None:
        super().__init__()
        self._orders: Dict[str, Order] = {}
        self._selected: Optional[str] = None
        self._symbol = "R$"

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield Markdown("", id="md-stats")
            yield DataTable(id="table-all-orders")
            yield MarkdownViewer(id="md-order-detail", show_table_of_contents=False)
            with Horizontal(id="hort-status"):
                with Vertical():
                    yield Label("Status")
                    yield Select(
                        [(s.title(), s) for s in ORDER_STATUSES],
                        value="PENDING",
                        allow_blank=False,
                        id="select-status",
                    )
                with Vertical():
                    yield Label("Tracking code (blank keeps current)")
                    yield Input(placeholder="GBR-000000", id="input-tracking")
                with Vertical(id="vert-clear-tracking"):
                    yield Label("Clear code")
                    yield Switch(value=False, id="switch-clear-tracking")
                yield Button("Update", id="btn-update-status", variant="success")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("Order No", "Date", "Customer", "Status", "Total")
        self.handle_reload()

    @on(OrdersChangedMessage)
    @on(ScreenResume)
    @on(ModeSwitchedMessage)
    @work(exclusive=True, group="dashboard")
    async def handle_reload(self) -> None:
        self._symbol = (await self.app.api.get_settings()).currency_symbol
        stats = await self.app.api.get_stats()
        orders = await self.app.api.list_orders()
        self._orders = {o.ono: o for o in orders}

        await self.query_one("#md-stats", Markdown).update(
            "### Dashboard\n\n"
            f"- Users: {stats.total_users}\n"
            f"- Orders: {stats.total_orders}\n"
            f"- Revenue: {format_money(stats.total_revenue, self._symbol)}\n"
            f"- Latest: {', '.join(o.ono for o in stats.recent_orders[:3]) or '-'}\n"
        )

        table = self.query_one(DataTable)
        table.clear()
        for o in orders:
            table.add_row(
                o.ono,
                format_when(o.created_at),
                o.customer.name,
                o.status,
                format_money(o.total, self._symbol),
                key=o.ono,
            )
        self._render_detail()

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self, event: DataTable.RowHighlighted) -> None:
        self._selected = event.row_key.value
        order = self._orders.get(self._selected)
        if order:
            self.query_one("#select-status", Select).value = order.status
        self._render_detail()

    def _render_detail(self) -> None:
        order = self._orders.get(self._selected) if self._selected else None
        md = render_order_detail(order, self._symbol)
        self.query_one("#md-order-detail", MarkdownViewer).document.update(md)

    @on(Button.Pressed, "#btn-update-status")
    @work(exclusive=True)
    async def handle_update_status(self) -> None:
        if self._selected is None:
            self.notify("Select an order first.", severity="warning")
            return
        status = self.query_one("#select-status", Select).value
        tracking_input = self.query_one("#input-tracking", Input)
        clear_switch = self.query_one("#switch-clear-tracking", Switch)
        tracking = tracking_code_arg(tracking_input.value, clear_switch.value)
        try:
            order = await self.app.api.update_status(self._selected, status, tracking)
        except (StorefrontError, ValueError) as err:
            self.report(err)
            return

        tracking_input.value = ""
        clear_switch.value = False
        self.notify(f"Order {order.ono} is now {order.status}. Customer notified.")
        self.post_message(OrdersChangedMessage())
