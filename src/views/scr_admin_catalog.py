from __future__ import annotations

from typing import Dict, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.events import ScreenResume
from textual.validation import Number
from textual.widgets import Button, DataTable, Input, Label

from store.models import Product
from utils.errors import StorefrontError
from utils.messages import ModeSwitchedMessage
from utils.pure import format_money, parse_money_input
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal


class AdminCatalogScreen(BaseScreen):
    """
    Admins create, edit, show/hide and delete products.
    """

    def __init__(self) -> None:
        super().__init__()
        self._products: Dict[int, Product] = {}
        self.current_pid: Optional[int] = None

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with Vertical():
            yield DataTable(id="table-catalog")
            with Horizontal(id="hort-edit"):
                with Vertical():
                    yield Label("Name")
                    yield Input(id="input-name")
                with Vertical():
                    yield Label("Price")
                    yield Input(placeholder="1299,90", id="input-price")
                with Vertical():
                    yield Label("Stock")
                    yield Input(id="input-stock", type="integer", validators=[Number(minimum=0)])
            yield Label("Description")
            yield Input(id="input-descr")
            yield Label("Image URL")
            yield Input(id="input-image")
            with Horizontal(id="hort-catalog-btns"):
                yield Button("New", id="btn-new")
                yield Button("Save", id="btn-save", variant="success")
                yield Button("Show / Hide", id="btn-toggle", variant="warning")
                yield Button("Delete", id="btn-delete", variant="error")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.cursor_type = "row"
        table.zebra_stripes = True
        table.add_columns("PID", "Name", "Price", "Stock", "Visible")
        self.load_products()

    @on(ScreenResume)
    @on(ModeSwitchedMessage)
    def handle_refresh(self) -> None:
        self.load_products()

    @work(exclusive=True, group="catalog")
    async def load_products(self) -> None:
        symbol = (await self.app.api.get_settings()).currency_symbol
        products = await self.app.api.list_products(include_inactive=True)
        self._products = {p.pid: p for p in products}
        table = self.query_one(DataTable)
        table.clear()
        for p in products:
            table.add_row(
                p.pid,
                p.name,
                format_money(p.price, symbol),
                p.stock_count,
                "yes" if p.active else "no",
                key=str(p.pid),
            )

    @on(DataTable.RowHighlighted)
    def handle_row_highlight(self, event: DataTable.RowHighlighted) -> None:
        self.current_pid = int(event.row_key.value)
        prod = self._products.get(self.current_pid)
        if prod is None:
            return
        # prefill inputs with current values for convenience
        self.query_one("#input-name", Input).value = prod.name
        self.query_one("#input-price", Input).value = f"{prod.price // 100},{prod.price % 100:02d}"
        self.query_one("#input-stock", Input).value = str(prod.stock_count)
        self.query_one("#input-descr", Input).value = prod.descr
        self.query_one("#input-image", Input).value = prod.image

    @on(Button.Pressed, "#btn-new")
    @work(exclusive=True)
    async def handle_new(self) -> None:
        prod = await self.app.api.create_product("New product")
        self.notify(f"Product {prod.pid} created hidden. Edit it, then show it.")
        self.load_products()

    @on(Button.Pressed, "#btn-save")
    @work(exclusive=True)
    async def handle_save(self) -> None:
        if self.current_pid is None:
            self.notify("Select a product first.", severity="warning")
            return
        stock_input = self.query_one("#input-stock", Input)
        if not stock_input.value.isdigit():
            stock_input.add_class("-invalid")
            stock_input.focus()
            return
        try:
            await self.app.api.update_product(
                self.current_pid,
                name=self.query_one("#input-name", Input).value.strip(),
                price=parse_money_input(self.query_one("#input-price", Input).value),
                stock_count=int(stock_input.value),
                descr=self.query_one("#input-descr", Input).value.strip(),
                image=self.query_one("#input-image", Input).value.strip(),
            )
        except (StorefrontError, ValueError) as err:
            self.report(err)
            return
        self.notify("Product updated successfully.")
        self.load_products()

    @on(Button.Pressed, "#btn-toggle")
    @work(exclusive=True)
    async def handle_toggle(self) -> None:
        prod = self._products.get(self.current_pid) if self.current_pid else None
        if prod is None:
            return
        try:
            await self.app.api.set_product_active(prod.pid, not prod.active)
        except StorefrontError as err:
            self.report(err)
            return
        self.load_products()

    @on(Button.Pressed, "#btn-delete")
    @work(exclusive=True)
    async def handle_delete(self) -> None:
        if self.current_pid is None:
            return
        if not await self.app.push_screen_wait(
            DialogModal(
                f"Delete product {self.current_pid}? Placed orders keep their copy.",
                primary_text="Delete",
                secondary_text="Cancel",
                tone="error",
            )
        ):
            return
        try:
            await self.app.api.delete_product(self.current_pid)
        except StorefrontError as err:
            self.report(err)
            return
        self.current_pid = None
        self.load_products()
