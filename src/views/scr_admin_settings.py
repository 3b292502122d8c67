from dataclasses import replace

from textual import on, work
from textual.app import ComposeResult
from textual.containers import Horizontal, VerticalScroll
from textual.events import ScreenResume
from textual.widgets import Button, Input, Label, Switch

from utils.messages import ModeSwitchedMessage
from views.base_screen import BaseScreen

TEXT_FIELDS = {
    "site_name": "Site name",
    "logo": "Logo URL (blank uses the default)",
    "whatsapp": "WhatsApp",
    "email": "Contact email",
    "currency_symbol": "Currency symbol",
}

FLAG_FIELDS = {
    "maintenance_mode": "Maintenance mode",
    "banner_active": "Banner",
    "home_hero_visible": "Home hero",
}


class AdminSettingsScreen(BaseScreen):
    def compose(self) -> ComposeResult:
        yield from super().compose()
        with VerticalScroll(id="div-settings"):
            for fld, caption in TEXT_FIELDS.items():
                yield Label(caption)
                yield Input(id=f"input-{fld}")
            for fld, caption in FLAG_FIELDS.items():
                with Horizontal(classes="row-switch"):
                    yield Switch(id=f"switch-{fld}")
                    yield Label(caption)
            yield Button("Save", id="btn-save-settings", variant="success")

    def on_mount(self) -> None:
        self.load_settings()

    @on(ScreenResume)
    @on(ModeSwitchedMessage)
    def handle_refresh(self) -> None:
        self.load_settings()

    @work(exclusive=True)
    async def load_settings(self) -> None:
        site = await self.app.api.get_settings()
        for fld in TEXT_FIELDS:
            self.query_one(f"#input-{fld}", Input).value = getattr(site, fld) or ""
        for fld in FLAG_FIELDS:
            self.query_one(f"#switch-{fld}", Switch).value = getattr(site, fld)

    @on(Button.Pressed, "#btn-save-settings")
    @work(exclusive=True)
    async def handle_save(self) -> None:
        site = await self.app.api.get_settings()
        changes = {fld: self.query_one(f"#input-{fld}", Input).value.strip() for fld in TEXT_FIELDS}
        changes["logo"] = changes["logo"] or None
        changes.update(
            {fld: self.query_one(f"#switch-{fld}", Switch).value for fld in FLAG_FIELDS}
        )
        try:
            site = await self.app.api.save_settings(replace(site, **changes))
        except ValueError as err:
            self.report(err)
            return
        self.app.title = site.site_name
        self.notify("Settings saved.")
