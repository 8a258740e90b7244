import json
from datetime import datetime

import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture
from storefront.catalog import reset_catalog, set_catalog
from storefront.catalog.memory_adapter import InMemoryCatalog
from storefront.catalog.port import CatalogProduct
from storefront.checkout.draft import CheckoutDraft, PaymentProof
from storefront.checkout.procedure import reset_procedure, set_procedure
from storefront.checkout.procedure.domain_adapter import DomainOrderProcedure
from storefront.notifications import reset_email_channel, set_email_channel
from storefront.notifications.fake_email import FakeEmailAdapter
from storefront.order.placement import PlaceOrder
from storefront.session import SessionContext
from storefront.storage import reset_storage, set_storage
from storefront.storage.memory_adapter import InMemoryObjectStorage


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        for _, broker in current_domain.brokers.items():
            broker._data_reset()

        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def _adapters():
    """Every test starts with fresh collaborator adapters."""
    reset_catalog()
    reset_storage()
    reset_procedure()
    reset_email_channel()
    yield
    reset_catalog()
    reset_storage()
    reset_procedure()
    reset_email_channel()


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------
@pytest.fixture()
def catalog():
    catalog = InMemoryCatalog(
        [
            CatalogProduct("prod-longganisa", "Longganisa", 100.0, size="500g", temperature="frozen", qty_available=10),
            CatalogProduct("prod-tapa", "Beef Tapa", 250.0, size="1kg", temperature="frozen", qty_available=2),
            CatalogProduct("prod-ube", "Ube Halaya", 180.0, size="350ml", temperature="chilled", unlimited_stock=True),
            CatalogProduct("prod-lechon", "Lechon Belly", 1500.0, size="2kg", temperature="chilled", qty_available=0),
        ]
    )
    set_catalog(catalog)
    return catalog


@pytest.fixture()
def storage():
    storage = InMemoryObjectStorage()
    set_storage(storage)
    return storage


@pytest.fixture()
def procedure():
    procedure = DomainOrderProcedure()
    set_procedure(procedure)
    return procedure


@pytest.fixture()
def mailbox():
    mailbox = FakeEmailAdapter()
    set_email_channel(mailbox)
    return mailbox


# ---------------------------------------------------------------------------
# Callers
# ---------------------------------------------------------------------------
@pytest.fixture()
def session():
    return SessionContext(session_id="sess-001")


@pytest.fixture()
def member():
    return SessionContext(session_id="sess-002", user_id="user-002")


@pytest.fixture()
def staff():
    return SessionContext(session_id="sess-staff", user_id="staff-001", is_staff=True)


# ---------------------------------------------------------------------------
# Checkout inputs
# ---------------------------------------------------------------------------
@pytest.fixture()
def now():
    """A Tuesday morning, store-local."""
    return datetime(2026, 3, 10, 9, 0)


@pytest.fixture()
def draft():
    return CheckoutDraft(
        full_name="Maria Santos",
        email="maria@example.com",
        phone="09171234567",
        line1="12 Sampaguita St",
        barangay="Tambo",
        city="Paranaque",
        province="Metro Manila",
        postal_code="1700",
        delivery_date="2026-03-11",
        delivery_slot="14:00",
    )


@pytest.fixture()
def proof():
    return PaymentProof(filename="gcash receipt.png", content=b"\x89PNG-proof", content_type="image/png")


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
def place_order(lines=None, delivery_fee=100.0, thermal_bag_fee=0.0, session_id="sess-001", **details):
    """Place an order directly and return its id."""
    lines = lines or [
        {"product_id": "prod-longganisa", "name": "Longganisa", "unit_price": 100.0, "qty": 3},
        {"product_id": "prod-tapa", "name": "Beef Tapa", "unit_price": 250.0, "qty": 1},
    ]
    details = {
        "full_name": "Maria Santos",
        "email": "maria@example.com",
        "phone": "09171234567",
        "address": "12 Sampaguita St, Tambo, Paranaque, Metro Manila, 1700, Philippines",
        "postal_code": "1700",
        "delivery_date": "2026-03-11",
        "delivery_slot": "14:00",
        "add_thermal_bag": thermal_bag_fee > 0,
        **details,
    }
    return current_domain.process(
        PlaceOrder(
            session_id=session_id,
            user_id=details.pop("user_id", None),
            details=json.dumps(details),
            lines=json.dumps(lines),
            delivery_fee=delivery_fee,
            thermal_bag_fee=thermal_bag_fee,
        ),
        asynchronous=False,
    )


@pytest.fixture()
def order_id():
    return place_order()


@pytest.fixture()
def place():
    return place_order
