# provide dataclass models
# money is always an int amount in minor units (cents)

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Optional, Tuple

Role = Literal["ADMIN", "USER"]
OrderStatus = Literal["PENDING", "PAID", "SHIPPED", "DELIVERED"]
PaymentMethod = Literal["PIX", "CREDIT_CARD", "DEBIT_CARD"]
Channel = Literal["email", "phone"]

ORDER_STATUSES: Tuple[str, ...] = ("PENDING", "PAID", "SHIPPED", "DELIVERED")
PAYMENT_METHODS: Tuple[str, ...] = ("PIX", "CREDIT_CARD", "DEBIT_CARD")
CHANNELS: Tuple[str, ...] = ("email", "phone")


@dataclass(frozen=True)
class User:
    uid: int
    username: str
    email: str
    name: str
    pwd_hash: str
    role: Role = "USER"
    phone: Optional[str] = None

    def public(self) -> "PublicUser":
        return PublicUser(
            uid=self.uid,
            username=self.username,
            email=self.email,
            name=self.name,
            role=self.role,
            phone=self.phone,
        )


@dataclass(frozen=True)
class PublicUser:
    """User as handed to callers, without the password hash."""

    uid: int
    username: str
    email: str
    name: str
    role: Role
    phone: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "ADMIN"


@dataclass(frozen=True)
class Product:
    pid: int
    name: str
    price: int
    image: str = ""
    descr: str = ""
    stock_count: int = 0
    active: bool = True


@dataclass(frozen=True)
class CartItem:
    pid: int
    qty: int


@dataclass(frozen=True)
class Customer:
    """Contact details captured at checkout, independent of later user edits."""

    name: str
    email: str = ""
    phone: str = ""


@dataclass(frozen=True)
class Address:
    street: str
    city: str
    state: str
    zip: str

    def one_line(self) -> str:
        return f"{self.street}, {self.city} - {self.state}, {self.zip}"


@dataclass(frozen=True)
class OrderLine:
    pid: int
    name: str
    qty: int
    uprice: int  # unit price at time of order

    @property
    def line_total(self) -> int:
        return self.qty * self.uprice


@dataclass(frozen=True)
class Order:
    ono: str
    uid: int
    customer: Customer
    address: Address
    lines: Tuple[OrderLine, ...]
    total: int
    status: OrderStatus
    payment_method: PaymentMethod
    created_at: datetime
    tracking_code: Optional[str] = None


@dataclass(frozen=True)
class PasswordReset:
    rid: str
    uid: int
    code: str
    expires_at: datetime
    used: bool = False

    def is_active(self, when: datetime) -> bool:
        return not self.used and self.expires_at > when


@dataclass
class LoginAttempts:
    count: int = 0
    last_failure: Optional[datetime] = None


@dataclass(frozen=True)
class SiteSettings:
    site_name: str = "GBR Estilos"
    logo: Optional[str] = None
    default_logo: str = "https://cdn-icons-png.flaticon.com/512/5305/5305049.png"
    whatsapp: str = "5511986628325"
    email: str = "contato@gbrestilos.com"
    maintenance_mode: bool = False
    banner_active: bool = True
    home_hero_visible: bool = True
    currency_symbol: str = "R$"


@dataclass(frozen=True)
class AdminStats:
    total_users: int
    total_orders: int
    total_revenue: int
    recent_orders: Tuple[Order, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Session:
    token: str
    user: PublicUser
