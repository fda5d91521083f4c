"""User aggregate: the owner of carts and orders.

Credentials and tokens live with the authentication provider; this aggregate
only carries what the storefront needs to attribute carts and orders and to
tell customers from administrators.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, String

from storefront.domain import storefront


class Role(Enum):
    CUSTOMER = "CUSTOMER"
    ADMIN = "ADMIN"


@storefront.event(part_of="User")
class UserRegistered:
    user_id = Identifier(required=True)
    email = String(required=True)
    role = String(required=True)
    registered_at = DateTime(required=True)


@storefront.aggregate
class User:
    email = String(required=True, max_length=254)
    first_name = String(max_length=100)
    last_name = String(max_length=100)
    role = String(choices=Role, default=Role.CUSTOMER.value)
    created_at = DateTime()

    @classmethod
    def register(cls, email, first_name=None, last_name=None, role=Role.CUSTOMER.value):
        now = datetime.now(UTC)
        user = cls(
            email=email.strip().lower(),
            first_name=first_name,
            last_name=last_name,
            role=role,
            created_at=now,
        )
        user.raise_(
            UserRegistered(
                user_id=str(user.id),
                email=user.email,
                role=user.role,
                registered_at=now,
            )
        )
        return user

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)
