# shared fixtures for the test suites
import re
from dataclasses import dataclass
from typing import List, Optional

from services.api import StorefrontApi
from utils.config import Settings

CODE_RE = re.compile(r"code: (\d+)")


@dataclass
class Delivery:
    channel: str
    recipient: str
    body: str
    subject: Optional[str] = None


class RecordingGateway:
    """Notification gateway double; remembers every call."""

    def __init__(self) -> None:
        self.sent: List[Delivery] = []

    async def deliver(self, channel, recipient, body, subject=None) -> bool:
        self.sent.append(Delivery(channel, recipient, body, subject))
        return True

    def to(self, recipient: str) -> List[Delivery]:
        return [d for d in self.sent if d.recipient == recipient]

    def last_code(self) -> str:
        for d in reversed(self.sent):
            match = CODE_RE.search(d.body)
            if match:
                return match.group(1)
        raise AssertionError("no recovery code was sent")

    def clear(self) -> None:
        self.sent.clear()


def make_settings(**overrides) -> Settings:
    values = {"latency_ms": 0, "seed_demo_data": True, "secret_key": "test-secret"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_api(**overrides):
    """Seeded, zero latency api plus the gateway it notifies through."""
    gateway = RecordingGateway()
    api = StorefrontApi.create(make_settings(**overrides), gateway=gateway)
    return api, gateway
