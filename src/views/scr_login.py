from textual import on, work
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.events import Key
from textual.widgets import Button, Input, Label, Select, TabbedContent, TabPane

from utils.errors import StorefrontError, ThrottledError
from utils.messages import UserLoginMessage
from views.base_screen import BaseScreen
from views.modal_dialog import DialogModal, QuitDialogModal


class LoginScreen(BaseScreen):
    """
    Login, sign up and password recovery. Dismissed once a session exists.
    """

    def __init__(self):
        super().__init__()
        self.configure(header_sub_title="Login", show_sidebar=False)

    def compose(self) -> ComposeResult:
        yield from super().compose()
        with TabbedContent(id="super-tab-loginscr"):
            with TabPane("Login", id="tab-login"):
                with Vertical(id="div-login"):
                    yield Label("Username or email")
                    yield Input(placeholder="cliente_demo", id="input-login-id")
                    yield Label("Password")
                    yield Input(placeholder="*********", password=True, id="input-login-pwd")
                    with Horizontal(id="div-login-btns"):
                        yield Button("Quit", id="btn-quit")
                        yield Button("Login", id="btn-login", variant="primary")

            with TabPane("Sign up", id="tab-signup"):
                with Vertical(id="div-reg"):
                    yield Label("Username")
                    yield Input(placeholder="jane", id="input-reg-username")
                    yield Label("Name")
                    yield Input(placeholder="Jane Doe", id="input-reg-name")
                    yield Label("Email")
                    yield Input(placeholder="user@example.com", id="input-reg-email")
                    yield Label("Phone (optional)")
                    yield Input(placeholder="11999999999", id="input-reg-phone")
                    yield Label("Password")
                    yield Input(placeholder="*********", password=True, id="input-reg-pwd")
                    with Container(id="div-reg-btns"):
                        yield Button("Register", id="btn-reg", variant="primary")

            with TabPane("Forgot password", id="tab-recover"):
                with Vertical(id="div-recover"):
                    yield Label("Username or email")
                    yield Input(placeholder="user@example.com", id="input-rec-id")
                    yield Label("Send code by")
                    yield Select(
                        [("Email", "email"), ("WhatsApp / SMS", "phone")],
                        value="email",
                        allow_blank=False,
                        id="select-rec-channel",
                    )
                    yield Button("Send code", id="btn-rec-send")
                    yield Label("Code")
                    yield Input(placeholder="000000", id="input-rec-code", max_length=6)
                    yield Label("New password")
                    yield Input(placeholder="*********", password=True, id="input-rec-pwd")
                    yield Button("Reset password", id="btn-rec-reset", variant="primary")

    def on_mount(self):
        self.query_one("#input-login-id").focus()

    def on_key(self, event: Key) -> None:
        if event.key != "enter":
            return
        if self.focused == self.query_one("#input-login-pwd"):
            self.handle_login_submit()
        elif self.focused == self.query_one("#input-reg-pwd"):
            self.handle_registration_submit()

    @on(Button.Pressed, "#btn-login")
    @work(exclusive=True)
    async def handle_login_submit(self) -> None:
        identifier = self.query_one("#input-login-id", Input).value.strip()
        pwd = self.query_one("#input-login-pwd", Input).value

        if not identifier or not pwd:
            self.notify("Username or password cannot be empty!", severity="error")
            return

        input_login_pwd = self.query_one("#input-login-pwd", Input)
        try:
            session = await self.app.api.login(identifier, pwd)
        except ThrottledError as err:
            minutes = max(int(err.retry_after.total_seconds() // 60), 1)
            self.notify(f"{err} (about {minutes} min)", severity="error")
            return
        except StorefrontError as err:
            self.report(err)
            input_login_pwd.value = ""
            input_login_pwd.focus()
            input_login_pwd.add_class("-invalid")
            return

        self.app.state.start_session(session)
        self.notify(f"Hello {session.user.name}!")
        self.app.post_message(UserLoginMessage())
        self.dismiss()

    @on(Button.Pressed, "#btn-reg")
    @work(exclusive=True)
    async def handle_registration_submit(self) -> None:
        username = self.query_one("#input-reg-username", Input).value.strip()
        name = self.query_one("#input-reg-name", Input).value.strip()
        email = self.query_one("#input-reg-email", Input).value.strip()
        phone = self.query_one("#input-reg-phone", Input).value.strip()
        pwd = self.query_one("#input-reg-pwd", Input).value

        if not username or not name or not email or not pwd:
            self.notify("Make sure all required inputs are filled.", severity="error")
            return

        try:
            session = await self.app.api.register(username, email, name, pwd, phone or None)
        except (StorefrontError, ValueError) as err:
            self.report(err)
            return

        await self.app.push_screen_wait(
            DialogModal(f"Registration successful. Welcome, {session.user.name}!")
        )
        self.app.state.start_session(session)
        self.app.post_message(UserLoginMessage())
        self.dismiss()

    @on(Button.Pressed, "#btn-rec-send")
    @work(exclusive=True)
    async def handle_recovery_request(self) -> None:
        identifier = self.query_one("#input-rec-id", Input).value.strip()
        channel = self.query_one("#select-rec-channel", Select).value
        if not identifier:
            self.notify("Enter your username or email.", severity="error")
            return
        try:
            await self.app.api.request_recovery(identifier, channel)
        except StorefrontError as err:
            self.report(err)
            return
        ttl = self.app.api.settings.recovery_ttl_minutes
        self.notify(f"Code sent. It is valid for {ttl} minutes.")
        self.query_one("#input-rec-code", Input).focus()

    @on(Button.Pressed, "#btn-rec-reset")
    @work(exclusive=True)
    async def handle_recovery_redeem(self) -> None:
        code = self.query_one("#input-rec-code", Input).value.strip()
        pwd = self.query_one("#input-rec-pwd", Input).value
        if not code or not pwd:
            self.notify("Enter the code and a new password.", severity="error")
            return
        try:
            await self.app.api.redeem_recovery(code, pwd)
        except (StorefrontError, ValueError) as err:
            self.report(err)
            return

        self.notify("Password changed. You can log in now.")
        self.get_child_by_type(TabbedContent).active = "tab-login"
        self.query_one("#input-login-pwd", Input).focus()

    @on(Button.Pressed, "#btn-quit")
    def handle_quit_(self) -> None:
        self.app.push_screen(QuitDialogModal())
