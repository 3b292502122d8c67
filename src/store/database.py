# in-memory entity store; every access goes through Database.connect()
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import (
    AsyncIterator,
    Callable,
    Dict,
    Generic,
    Hashable,
    Iterable,
    List,
    Optional,
    Protocol,
    TypeVar,
)

from store import models
from utils.logger import get_logger

_logger = get_logger(__name__)

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")


class Repository(Protocol[K, T]):
    """CRUD over one entity collection. Implementations must not await."""

    def get(self, key: K) -> Optional[T]: ...

    def put(self, key: K, record: T) -> T: ...

    def delete(self, key: K) -> bool: ...

    def all(self) -> List[T]: ...

    def find(self, pred: Callable[[T], bool]) -> Optional[T]: ...

    def filter(self, pred: Callable[[T], bool]) -> List[T]: ...

    def __contains__(self, key: object) -> bool: ...

    def __len__(self) -> int: ...


class MemoryRepository(Generic[K, T]):
    """Dict backed repository, iteration follows insertion order."""

    def __init__(self, records: Iterable[tuple[K, T]] = ()) -> None:
        self._rows: Dict[K, T] = dict(records)

    def get(self, key: K) -> Optional[T]:
        return self._rows.get(key)

    def put(self, key: K, record: T) -> T:
        self._rows[key] = record
        return record

    def delete(self, key: K) -> bool:
        return self._rows.pop(key, None) is not None

    def all(self) -> List[T]:
        return list(self._rows.values())

    def find(self, pred: Callable[[T], bool]) -> Optional[T]:
        for row in self._rows.values():
            if pred(row):
                return row
        return None

    def filter(self, pred: Callable[[T], bool]) -> List[T]:
        return [row for row in self._rows.values() if pred(row)]

    def keys(self) -> List[K]:
        return list(self._rows.keys())

    def __contains__(self, key: object) -> bool:
        return key in self._rows

    def __len__(self) -> int:
        return len(self._rows)


class Connection:
    """The collections visible inside one ``Database.connect()`` block."""

    def __init__(self, db: Database) -> None:
        self._db = db

    @property
    def users(self) -> Repository[int, models.User]:
        return self._db.users

    @property
    def products(self) -> Repository[int, models.Product]:
        return self._db.products

    @property
    def orders(self) -> Repository[str, models.Order]:
        return self._db.orders

    @property
    def resets(self) -> Repository[str, models.PasswordReset]:
        return self._db.resets

    @property
    def settings(self) -> models.SiteSettings:
        return self._db.site_settings

    @settings.setter
    def settings(self, value: models.SiteSettings) -> None:
        self._db.site_settings = value


class Database:
    """
    Process-wide store shared by the services.

    Repositories are injected so a test (or a future real backend) can swap
    them. ``connect()`` sleeps for the simulated latency first, then holds a
    single lock while the caller reads and mutates, so no caller ever sees
    another's half-applied change.
    """

    def __init__(
        self,
        users: Optional[Repository[int, models.User]] = None,
        products: Optional[Repository[int, models.Product]] = None,
        orders: Optional[Repository[str, models.Order]] = None,
        resets: Optional[Repository[str, models.PasswordReset]] = None,
        site_settings: Optional[models.SiteSettings] = None,
        latency: float = 0.0,
    ) -> None:
        self.users = users if users is not None else MemoryRepository()
        self.products = products if products is not None else MemoryRepository()
        self.orders = orders if orders is not None else MemoryRepository()
        self.resets = resets if resets is not None else MemoryRepository()
        self.site_settings = site_settings or models.SiteSettings()
        self.latency = latency
        self._lock = asyncio.Lock()
        # ids are never handed out twice, even after the row is deleted
        self._last_uid = max((u.uid for u in self.users.all()), default=0)
        self._last_pid = max((p.pid for p in self.products.all()), default=0)

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[Connection]:
        if self.latency > 0:
            await asyncio.sleep(self.latency)
        async with self._lock:
            yield Connection(self)

    def next_uid(self) -> int:
        top = max((u.uid for u in self.users.all()), default=0)
        self._last_uid = max(self._last_uid, top) + 1
        return self._last_uid

    def next_pid(self) -> int:
        top = max((p.pid for p in self.products.all()), default=0)
        self._last_pid = max(self._last_pid, top) + 1
        return self._last_pid

    def describe(self) -> str:
        return (
            f"{len(self.users)} users, {len(self.products)} products, "
            f"{len(self.orders)} orders, {len(self.resets)} reset tokens"
        )
