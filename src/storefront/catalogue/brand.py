"""Brand aggregate: the maker products are sold under."""

from datetime import UTC, datetime

from protean.fields import Boolean, DateTime, String, Text

from storefront.catalogue.events import BrandCreated, BrandUpdated
from storefront.domain import storefront


@storefront.aggregate
class Brand:
    name = String(required=True, max_length=100)
    description = Text()
    logo_url = String(max_length=255)
    website_url = String(max_length=255)
    country_of_origin = String(max_length=100)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, name, description=None, logo_url=None, website_url=None, country_of_origin=None):
        now = datetime.now(UTC)
        brand = cls(
            name=name,
            description=description,
            logo_url=logo_url,
            website_url=website_url,
            country_of_origin=country_of_origin,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        brand.raise_(BrandCreated(brand_id=str(brand.id), name=name, country_of_origin=country_of_origin))
        return brand

    def update_details(self, **changes):
        """Apply the edits whose value is not None."""
        for field_name, value in changes.items():
            if value is not None:
                setattr(self, field_name, value)
        self.updated_at = datetime.now(UTC)

        self.raise_(BrandUpdated(brand_id=str(self.id), name=self.name, is_active=self.is_active))
