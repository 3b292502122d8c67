from typing import Dict

from textual import events, on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, MarkdownViewer, Select

from store.models import Address, Customer, Product
from utils.errors import StorefrontError
from utils.pure import format_money, generate_markdown_table
from views.modal_dialog import DialogModal

PAYMENT_OPTIONS = [("PIX", "PIX"), ("Credit card", "CREDIT_CARD"), ("Debit card", "DEBIT_CARD")]

ADDRESS_FIELDS = ["street", "city", "state", "zip"]


class CheckoutModal(ModalScreen[str]):
    """
    Order summary plus contact, shipping and payment inputs.
    Dismisses with the new order number, or an empty string if cancelled.
    """

    def __init__(self, products: Dict[int, Product], symbol: str):
        super().__init__()
        self.products = products
        self.symbol = symbol

    def compose(self) -> ComposeResult:
        with VerticalScroll(id="div-checkout"):
            yield MarkdownViewer("", show_table_of_contents=False)
            yield Label("Name")
            yield Input(id="input-name")
            yield Label("Email")
            yield Input(id="input-email")
            yield Label("Phone / WhatsApp")
            yield Input(id="input-phone")
            for fld in ADDRESS_FIELDS:
                yield Label(fld.capitalize())
                yield Input(id=f"input-{fld}")
            yield Label("Payment")
            yield Select(PAYMENT_OPTIONS, value="PIX", allow_blank=False, id="select-payment")
            with Horizontal():
                yield Button("Go Back", id="btn-quit")
                yield Button("Place Order", id="btn-submit", variant="primary")

    async def on_mount(self):
        user = self.app.state.user
        if user:
            self.query_one("#input-name", Input).value = user.name
            self.query_one("#input-email", Input).value = user.email
            self.query_one("#input-phone", Input).value = user.phone or ""

        rows = []
        subtotal = 0
        for item in self.app.state.cart_items():
            prod = self.products[item.pid]
            subtotal += prod.price * item.qty
            rows.append(
                [
                    prod.name,
                    format_money(prod.price, self.symbol),
                    item.qty,
                    format_money(prod.price * item.qty, self.symbol),
                ]
            )
        md = generate_markdown_table(
            ["Product Name", "Unit Price", "Quantity", "Total Price"],
            rows,
            ["l", "c", "c", "c"],
        )
        md += f"\n\n**Subtotal:** {format_money(subtotal, self.symbol)}"
        await self.query_one(MarkdownViewer).document.update("### Order Summary\n\n" + md)
        self.query_one("#input-street").focus()

    def on_key(self, event: events.Key) -> None:
        if event.key == "escape":
            self.dismiss("")

    def _value(self, fld: str) -> str:
        return self.query_one(f"#input-{fld}", Input).value.strip()

    @on(Button.Pressed, "#btn-submit")
    @work(exclusive=True)
    async def handle_submit(self):
        for fld in ["name", *ADDRESS_FIELDS]:
            if not self._value(fld):
                widget = self.query_one(f"#input-{fld}", Input)
                widget.focus()
                widget.add_class("-invalid")
                self.notify(f"{fld.capitalize()} is required.", severity="error")
                return

        if not await self.app.push_screen_wait(
            DialogModal(
                "Place order? This cannot be undone.",
                primary_text="Yes",
                secondary_text="No",
                tone="positive",
            )
        ):
            return

        customer = Customer(
            name=self._value("name"), email=self._value("email"), phone=self._value("phone")
        )
        address = Address(**{fld: self._value(fld) for fld in ADDRESS_FIELDS})
        try:
            order = await self.app.api.create_order(
                self.app.state.user.uid,
                customer,
                address,
                self.app.state.cart_items(),
                self.query_one("#select-payment", Select).value,
            )
        except (StorefrontError, ValueError) as err:
            self.notify(str(err), severity="error")
            return

        self.notify(f"Order placed. Your order number is {order.ono}.")
        self.dismiss(order.ono)

    @on(Button.Pressed, "#btn-quit")
    def handle_quit(self):
        self.dismiss("")
