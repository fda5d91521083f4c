"""Brand management: commands and handler for the brand catalogue."""

import structlog
from protean import handle
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.brand import Brand
from storefront.catalogue.product import Product
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


def get_brand(brand_id) -> Brand:
    try:
        return current_domain.repository_for(Brand).get(brand_id)
    except ObjectNotFoundError as exc:
        raise ObjectNotFoundError({"brand_id": [f"Brand not found: {brand_id}"]}) from exc


def _ensure_name_free(name, brand_id=None):
    existing = current_domain.repository_for(Brand).find_by_name(name)
    if existing is not None and str(existing.id) != str(brand_id):
        raise ValidationError({"name": [f"Brand with name '{name}' already exists"]})


@storefront.command(part_of="Brand")
class CreateBrand:
    name = String(required=True, max_length=100)
    description = Text()
    logo_url = String(max_length=255)
    website_url = String(max_length=255)
    country_of_origin = String(max_length=100)


@storefront.command(part_of="Brand")
class UpdateBrand:
    brand_id = Identifier(required=True)
    name = String(max_length=100)
    description = Text()
    logo_url = String(max_length=255)
    website_url = String(max_length=255)
    country_of_origin = String(max_length=100)
    is_active = Boolean()


@storefront.command(part_of="Brand")
class DeleteBrand:
    brand_id = Identifier(required=True)


@storefront.command_handler(part_of=Brand)
class ManageBrandHandler:
    @handle(CreateBrand)
    def create_brand(self, command):
        _ensure_name_free(command.name)

        brand = Brand.create(
            name=command.name.strip(),
            description=command.description,
            logo_url=command.logo_url,
            website_url=command.website_url,
            country_of_origin=command.country_of_origin,
        )
        current_domain.repository_for(Brand).add(brand)
        logger.info("Brand created", brand_id=str(brand.id), name=brand.name)
        return str(brand.id)

    @handle(UpdateBrand)
    def update_brand(self, command):
        brand = get_brand(command.brand_id)
        renamed = command.name is not None and command.name.strip() != brand.name
        if renamed:
            _ensure_name_free(command.name, brand.id)

        brand.update_details(
            name=command.name.strip() if command.name else None,
            description=command.description,
            logo_url=command.logo_url,
            website_url=command.website_url,
            country_of_origin=command.country_of_origin,
            is_active=command.is_active,
        )
        current_domain.repository_for(Brand).add(brand)

        if renamed:
            product_repo = current_domain.repository_for(Product)
            for product in product_repo.for_brand(brand.id):
                product.update_details(brand=brand.name)
                product_repo.add(product)
        logger.info("Brand updated", brand_id=str(brand.id))

    @handle(DeleteBrand)
    def delete_brand(self, command):
        brand = get_brand(command.brand_id)
        product_count = current_domain.repository_for(Product).count_for_brand(brand.id)
        if product_count:
            logger.warning("Brand still has products", brand_id=str(brand.id), product_count=product_count)
            raise InvalidOperationError(
                "Cannot delete brand that has associated products. Please reassign or remove products first."
            )

        current_domain.repository_for(Brand)._dao.delete(brand)
        logger.info("Brand deleted", brand_id=str(brand.id))
