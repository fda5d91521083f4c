"""Load every module that registers storefront elements, then initialize the domain.

Traversal is turned off: it imports files one directory deep in listing order
and would load ``storefront.api`` submodules ahead of their package. The API
package is imported here as well, so a later ``init()`` that does traverse,
such as the one in Protean's pytest ``DomainFixture``, finds nothing left to load.
"""

import importlib

from storefront.domain import storefront

ELEMENT_MODULES = (
    "storefront.catalogue.events",
    "storefront.catalogue.product",
    "storefront.catalogue.brand",
    "storefront.catalogue.category",
    "storefront.catalogue.repository",
    "storefront.catalogue.brand_management",
    "storefront.catalogue.category_management",
    "storefront.catalogue.management",
    "storefront.identity.user",
    "storefront.identity.registration",
    "storefront.cart.events",
    "storefront.cart.cart",
    "storefront.cart.repository",
    "storefront.cart.items",
    "storefront.cart.management",
    "storefront.cart.expiry",
    "storefront.order.events",
    "storefront.order.order",
    "storefront.order.repository",
    "storefront.order.creation",
    "storefront.order.fulfillment",
    "storefront.order.cancellation",
    "storefront.order.administration",
    "storefront.payment.completion",
    "storefront.payment.webhook",
    "storefront.api",
)


def init_storefront():
    for name in ELEMENT_MODULES:
        importlib.import_module(name)
    storefront.init(traverse=False)
    return storefront
