"""User registration: command and handler."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.identity.user import Role, User

logger = structlog.get_logger(__name__)


@storefront.command(part_of="User")
class RegisterUser:
    email = String(required=True, max_length=254)
    first_name = String(max_length=100)
    last_name = String(max_length=100)
    role = String(choices=Role, default=Role.CUSTOMER.value)


@storefront.command_handler(part_of=User)
class RegisterUserHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        repo = current_domain.repository_for(User)
        email = command.email.strip().lower()

        existing = repo._dao.query.filter(email=email).all()
        if existing.items:
            raise ValidationError({"email": ["Email is already registered"]})

        user = User.register(
            email=email,
            first_name=command.first_name,
            last_name=command.last_name,
            role=command.role or Role.CUSTOMER.value,
        )
        repo.add(user)
        logger.info("User registered", user_id=str(user.id), role=user.role)
        return str(user.id)
