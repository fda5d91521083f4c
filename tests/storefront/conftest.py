from uuid import uuid4

import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture

from storefront.catalogue.management import AddProduct
from storefront.identity.registration import RegisterUser
from storefront.identity.user import Role
from storefront.payment.gateway import FakeGateway, reset_gateway, set_gateway


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


@pytest.fixture(autouse=True)
def fake_gateway():
    gateway = FakeGateway()
    set_gateway(gateway)
    yield gateway
    reset_gateway()


@pytest.fixture()
def shipping():
    return {
        "name": "Jane Rider",
        "address_line1": "1 Stable Lane",
        "address_line2": "Barn 4",
        "city": "Lexington",
        "state": "KY",
        "postal_code": "40507",
        "country": "US",
        "phone": "+1-859-555-0100",
    }


@pytest.fixture()
def make_product():
    """Add a product through the catalogue command and return its id.

    Each call gets its own SKU unless one is passed in.
    """

    def _make(**overrides):
        defaults = {
            "name": "Trail Saddle",
            "price": 10.0,
            "stock_quantity": 5,
            "brand": "Circle Y",
            "model": "Flex2",
            "sku": f"SAD-{uuid4().hex[:8].upper()}",
            "category": "Saddles",
        }
        defaults.update(overrides)
        return current_domain.process(AddProduct(**defaults), asynchronous=False)

    return _make


@pytest.fixture()
def make_user():
    """Register a user and return its id."""

    def _make(email="rider@example.com", role=Role.CUSTOMER.value, **overrides):
        return current_domain.process(RegisterUser(email=email, role=role, **overrides), asynchronous=False)

    return _make
