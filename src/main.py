from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import LoadingIndicator

from services.api import StorefrontApi
from utils.config import get_settings
from utils.logger import get_logger
from utils.messages import ModeSwitchedMessage, QuitRequestedMessage, UserLogoutMessage
from utils.state import GlobalState
from views.scr_account import AccountScreen
from views.scr_admin_catalog import AdminCatalogScreen
from views.scr_admin_dashboard import AdminDashboardScreen
from views.scr_admin_settings import AdminSettingsScreen
from views.scr_login import LoginScreen
from views.scr_shop import ShopScreen

_logger = get_logger(__name__)


class StorefrontApp(App):
    BINDINGS = [
        Binding("ctrl+t", "switch_light", "Toggle Theme", show=True),
    ]

    MODES = {
        "shop": ShopScreen,
        "account": AccountScreen,
        "dashboard": AdminDashboardScreen,
        "catalog": AdminCatalogScreen,
        "settings": AdminSettingsScreen,
    }

    ADMIN_MODES = {
        "dashboard": "Dashboard",
        "catalog": "Products",
        "settings": "Settings",
    }
    CUSTOMER_MODES = {
        "shop": "Shop",
        "account": "My Account",
    }

    CSS_PATH = [
        "styles/index.tcss",
        "styles/login.tcss",
        "styles/shop.tcss",
        "styles/admin.tcss",
    ]

    state: GlobalState
    api: StorefrontApi

    def __init__(self, api: StorefrontApi | None = None):
        super().__init__()
        self.state = GlobalState()
        self.api = api or StorefrontApi.create()

    def compose(self) -> ComposeResult:
        yield LoadingIndicator()

    async def on_mount(self) -> None:
        self.title = (await self.api.get_settings()).site_name
        self.main_flow()

    def action_switch_light(self):
        if self.theme == "textual-dark":
            self.theme = "solarized-light"
        else:
            self.theme = "textual-dark"
        self.notify(f"Theme changed to {self.theme}")

    @on(UserLogoutMessage)
    @work
    async def handle_user_logout(self):
        self.state.end_session()
        self.notify("Logout successful.")
        self.main_flow()

    @on(QuitRequestedMessage)
    def handle_quit(self):
        self.state.end_session()
        self.exit()

    @work
    async def main_flow(self):
        await self.push_screen_wait(LoginScreen())
        user = self.state.user
        if user is None:
            return
        new_mode = "dashboard" if user.is_admin else "shop"
        _logger.info(f"{user.username} entered {new_mode}")
        self.post_message(ModeSwitchedMessage(self.current_mode, new_mode))
        await self.switch_mode(new_mode)


def run() -> None:
    settings = get_settings()
    _logger.info(f"Starting storefront, simulated latency {settings.latency_ms} ms")
    StorefrontApp(StorefrontApi.create(settings)).run()


if __name__ == "__main__":
    run()
