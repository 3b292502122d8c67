# demo data loaded into a fresh store
from datetime import datetime

from store import models
from store.database import Database, MemoryRepository
from utils.logger import get_logger

_logger = get_logger(__name__)

DEMO_PRODUCTS = [
    models.Product(
        pid=1,
        name="Blazer Midnight Velvet",
        price=129900,
        image="https://picsum.photos/id/447/800/1000",
        descr="A statement piece for the modern connoisseur. Premium velvet, Italian cut.",
        stock_count=5,
    ),
    models.Product(
        pid=2,
        name="Vestido Silk Horizon",
        price=89900,
        image="https://picsum.photos/id/338/800/1000",
        descr="Fluid elegance that captures the essence of dusk. Pure silk.",
        stock_count=12,
    ),
    models.Product(
        pid=3,
        name="Bolsa de Couro Obsidian",
        price=245000,
        image="https://picsum.photos/id/656/800/1000",
        descr="Hand made Italian leather with 18k gold details.",
        stock_count=2,
    ),
    models.Product(
        pid=4,
        name="Echarpe Fios de Ouro",
        price=45000,
        image="https://picsum.photos/id/836/800/1000",
        descr="Woven with real gold threads for a subtle shine.",
        stock_count=20,
    ),
]


def demo_users(hash_password) -> list[models.User]:
    """Seed accounts; ``hash_password`` keeps clear secrets out of the store."""
    return [
        models.User(
            uid=1,
            username="admin",
            email="admin@gbrestilos.com",
            name="Administrator",
            pwd_hash=hash_password("admin123"),
            role="ADMIN",
            phone="11986628325",
        ),
        models.User(
            uid=2,
            username="cliente_demo",
            email="cliente@demo.com",
            name="Cliente Demo",
            pwd_hash=hash_password("123"),
            role="USER",
            phone="11999999999",
        ),
    ]


DEMO_ORDERS = [
    models.Order(
        ono="ord_1002",
        uid=2,
        customer=models.Customer(
            name="Maria Oliveira", email="maria@exemplo.com", phone="11988888888"
        ),
        address=models.Address(
            street="Av Paulista 2000", city="São Paulo", state="SP", zip="01310-200"
        ),
        lines=(models.OrderLine(pid=4, name="Echarpe Ouro", qty=1, uprice=45000),),
        total=45000,
        status="PAID",
        payment_method="CREDIT_CARD",
        created_at=datetime(2023, 10, 20, 10, 15),
    ),
    models.Order(
        ono="ord_1001",
        uid=2,
        customer=models.Customer(
            name="João Silva", email="joao@exemplo.com", phone="11999999999"
        ),
        address=models.Address(
            street="Rua das Flores 123", city="São Paulo", state="SP", zip="01000-000"
        ),
        lines=(models.OrderLine(pid=1, name="Blazer Midnight", qty=1, uprice=129900),),
        total=129900,
        status="DELIVERED",
        payment_method="PIX",
        created_at=datetime(2023, 10, 15, 14, 30),
        tracking_code="GBR-123456",
    ),
]


def seeded_database(hash_password, latency: float = 0.0) -> Database:
    db = Database(
        users=MemoryRepository((u.uid, u) for u in demo_users(hash_password)),
        products=MemoryRepository((p.pid, p) for p in DEMO_PRODUCTS),
        orders=MemoryRepository((o.ono, o) for o in DEMO_ORDERS),
        latency=latency,
    )
    _logger.info(f"Seeded demo store: {db.describe()}")
    return db
